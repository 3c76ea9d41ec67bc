"""Default configurations for review-sentinel."""

# File extensions eligible for static scanning (changed files with any other
# extension only contribute their diff to the review prompt)
CODE_FILE_EXTENSIONS = [
    ".js",  # JavaScript (syntax tree)
    ".jsx",  # React JSX (syntax tree)
    ".mjs",  # ES modules (syntax tree)
    ".cjs",  # CommonJS modules (syntax tree)
    ".ts",  # TypeScript (syntax tree)
    ".tsx",  # TypeScript + JSX (syntax tree)
    ".vue",  # Vue single-file components (regex fallback)
    ".py",  # Python (regex fallback)
    ".java",  # Java (regex fallback)
    ".cs",  # C# (regex fallback)
    ".php",  # PHP (regex fallback)
    ".go",  # Go (regex fallback)
    ".rb",  # Ruby (regex fallback)
    ".html",  # HTML (regex fallback)
]

# Extension to language mapping
LANGUAGE_MAPPINGS: dict[str, str] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".tsx": "tsx",
    ".vue": "vue",
    ".py": "python",
    ".java": "java",
    ".cs": "c_sharp",
    ".php": "php",
    ".go": "go",
    ".rb": "ruby",
    ".html": "html",
}

# Languages the structural scanner has a grammar and a pattern catalog for.
# Everything else goes straight to the regex fallback pass.
SYNTAX_TREE_LANGUAGES = frozenset({"javascript", "typescript", "tsx"})

# Prompt size bounds
DEFAULT_MAX_PROMPT_FILES = 10
DEFAULT_MAX_PATCH_CHARS = 2000
DEFAULT_MAX_HIGHLIGHTED_FINDINGS = 5

# Scoring
LOW_COMPLEXITY_THRESHOLD = 10
MAX_RECOMMENDATIONS = 5

# Stamped onto every AnalysisResult
ANALYSIS_VERSION = "2.0"
