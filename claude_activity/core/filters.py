"""Heuristic string lists used to separate real activity from noise.

These are plain data so they can be tuned or swapped without touching the
parsing code. Every consumer takes a ``FilterConfig`` and falls back to
``DEFAULT_FILTERS``.
"""

from dataclasses import dataclass, field

INTERRUPTION_MARKER = "[Request interrupted by user]"

# Claude Code UI artifacts that show up as user messages
UI_BOILERPLATE_PREFIXES = (
    "Invoke the ",
    "Base directory for this skill:",
)

# Command wrappers, hook feedback, and injected meta-instructions
NOISE_SUBSTRINGS = (
    "<command-message>",
    "<task-notification>",
    "<system-reminder>",
    "<ide_opened_file>",
    "<local-command-caveat>",
    "<bash-input>",
    "<local-command-stdout>",
    "<local-command-stderr>",
    "<bash-stdout>",
    "<bash-stderr>",
    "You are a Claude-Mem",
    "you are a Claude-Mem",
    "specialized observer",
    "searchable memory",
    "Stop hook feedback",
    "hook feedback:",
    "You MUST call the StructuredOutput",
    "StructuredOutput tool",
    "<observed_from_primary_session>",
    "<what_happened>",
    "<tool_result>",
    "<function_result>",
    "Analyze this conversation and determine",
    "Context: This summary will be shown",
    "Please write a concise, factual summary",
    "CONTINUE (should_continue:",
    "STOP (should_continue:",
    "should_continue",
    "System prompt:",
    "SYSTEM:",
    "# Commit and Push with PR Creation",
    "This command handles the complete workflo",
    "Run echo ",
)

LOW_VALUE_ASSISTANT_PREFIXES = (
    "i'll use the",
    "let me read",
    "now let me",
    "let me check",
    "let me look",
    "i'll read",
    "i'll check",
    "let me search",
    "let me explore",
    "i'll search",
    "i'll look",
)

SOURCE_EXTENSIONS = frozenset({
    "ts", "tsx", "js", "jsx", "swift", "py", "rs", "go", "java", "kt",
    "rb", "ex", "exs", "css", "scss", "html", "vue", "svelte",
    "json", "yaml", "yml", "toml", "sql", "graphql", "prisma",
    "md", "mdx", "sh", "bash", "zsh",
})

BORING_COMMANDS = frozenset({
    "ls", "cat", "head", "tail", "echo", "cd", "pwd", "which", "whoami",
    "wc", "stat", "file", "true", "false",
})

# Project directories belonging to memory/observer tooling, never user work
EXCLUDED_PATH_FRAGMENTS = (
    "claude-mem",
    "mem-observer",
    "observer-sessions",
    "double-shot",
    "claude-double-shot",
    "/subagents",
)

# Parent folders stripped from encoded project paths (first match wins)
COMMON_PARENT_FRAGMENTS = (
    "Documents-", "Projects-", "Developer-", "Desktop-",
    "repos-", "code-", "src-", "workspace-", "Work-",
    "dev-", "github-", "Git-", "Workspace-",
    "Crescendolab-", "co-",
)


@dataclass(frozen=True)
class FilterConfig:
    """Tunable heuristics for session extraction."""

    interruption_marker: str = INTERRUPTION_MARKER
    ui_boilerplate_prefixes: tuple[str, ...] = UI_BOILERPLATE_PREFIXES
    noise_substrings: tuple[str, ...] = NOISE_SUBSTRINGS
    low_value_assistant_prefixes: tuple[str, ...] = LOW_VALUE_ASSISTANT_PREFIXES
    source_extensions: frozenset[str] = field(default=SOURCE_EXTENSIONS)
    boring_commands: frozenset[str] = field(default=BORING_COMMANDS)
    excluded_path_fragments: tuple[str, ...] = EXCLUDED_PATH_FRAGMENTS
    common_parent_fragments: tuple[str, ...] = COMMON_PARENT_FRAGMENTS
    min_human_chars: int = 5
    min_assistant_chars: int = 50
    structural_char_threshold: int = 5

    def is_excluded_path(self, path: str) -> bool:
        """Case-insensitive substring match against the exclusion list."""
        lowered = path.lower()
        return any(fragment in lowered for fragment in self.excluded_path_fragments)


DEFAULT_FILTERS = FilterConfig()
