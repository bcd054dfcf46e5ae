"""Matcher language: compile configuration data into predicates and evaluate them.

A matcher is a closed tree of frozen dataclasses. Leaves test one property of
an entry (name glob, name regex, MIME category, kind, recent modification,
git changes, or always true); ``AllMatcher``/``NotMatcher``/``AnyOfMatcher``
compose them. A list given in a ``matchers:`` field compiles to an
``AnyOfMatcher`` (implicit OR).

Pattern errors are reported by :func:`compile_matcher` as ``ConfigError``;
evaluation itself never raises.
"""

from __future__ import annotations

import fnmatch
import re
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from ..durations import format_duration, parse_duration
from ..errors import ConfigError
from .entries import ENTRY_KINDS, FileEntry, GitChange
from .mime import MIME_CATEGORIES, mime_category

TYPE_EXECUTABLE = "executable"
MATCHER_TYPES = frozenset(ENTRY_KINDS | {TYPE_EXECUTABLE})

_REGEX_END_OF_TEXT_RE = re.compile(r"(?<!\\)((?:\\\\)*)\\z")


@dataclass(frozen=True)
class AnyMatcher:
    """Matches every entry."""


@dataclass(frozen=True)
class AllMatcher:
    children: tuple[MatcherNode, ...]


@dataclass(frozen=True)
class AnyOfMatcher:
    children: tuple[MatcherNode, ...]


@dataclass(frozen=True)
class NotMatcher:
    child: MatcherNode


@dataclass(frozen=True)
class GlobMatcher:
    patterns: tuple[str, ...]
    compiled: re.Pattern[str]


@dataclass(frozen=True)
class RegexMatcher:
    pattern: str
    compiled: re.Pattern[str]


@dataclass(frozen=True)
class MimeMatcher:
    category: str


@dataclass(frozen=True)
class TypeMatcher:
    kind: str


@dataclass(frozen=True)
class ChangedWithinMatcher:
    seconds: float


@dataclass(frozen=True)
class GitChangedMatcher:
    """Matches entries with uncommitted changes in their repository."""


MatcherNode = (
    AnyMatcher
    | AllMatcher
    | AnyOfMatcher
    | NotMatcher
    | GlobMatcher
    | RegexMatcher
    | MimeMatcher
    | TypeMatcher
    | ChangedWithinMatcher
    | GitChangedMatcher
)

NEVER = AnyOfMatcher(children=())


class MatchContext:
    """Evaluation-time inputs shared by every matcher in one scan.

    ``git_changes`` is called lazily, at most once, the first time a
    ``changes: git`` matcher needs it; it may block up to the collector
    deadline and returns ``None`` when no git data is available.
    """

    def __init__(
        self,
        now_ns: int | None = None,
        git_changes: Callable[[], dict[bytes, GitChange] | None] | None = None,
    ) -> None:
        self.now_ns = time.time_ns() if now_ns is None else now_ns
        self._git_changes_provider = git_changes
        self._git_changes_loaded = False
        self._git_changes: dict[bytes, GitChange] | None = None

    def git_changes(self) -> dict[bytes, GitChange] | None:
        if not self._git_changes_loaded:
            self._git_changes_loaded = True
            if self._git_changes_provider is not None:
                self._git_changes = self._git_changes_provider()
        return self._git_changes

    def git_change_for(self, entry: FileEntry) -> GitChange | None:
        if entry.collected.git_change is not None:
            return entry.collected.git_change
        changes = self.git_changes()
        if not changes:
            return None
        return changes.get(entry.name)


def evaluate(node: MatcherNode, entry: FileEntry, context: MatchContext) -> bool:
    """Return whether ``entry`` satisfies ``node``."""
    if isinstance(node, AnyMatcher):
        return True
    if isinstance(node, AnyOfMatcher):
        return any(evaluate(child, entry, context) for child in node.children)
    if isinstance(node, AllMatcher):
        return all(evaluate(child, entry, context) for child in node.children)
    if isinstance(node, NotMatcher):
        return not evaluate(node.child, entry, context)
    if isinstance(node, GlobMatcher):
        return node.compiled.match(entry.fs_name) is not None
    if isinstance(node, RegexMatcher):
        text_name = entry.text_name
        return text_name is not None and node.compiled.search(text_name) is not None
    if isinstance(node, MimeMatcher):
        return mime_category(entry.fs_name) == node.category
    if isinstance(node, TypeMatcher):
        if node.kind == TYPE_EXECUTABLE:
            return entry.is_executable
        return entry.kind == node.kind
    if isinstance(node, ChangedWithinMatcher):
        age_seconds = (context.now_ns - entry.mtime_ns) / 1e9
        return age_seconds <= node.seconds
    if isinstance(node, GitChangedMatcher):
        return context.git_change_for(entry) is not None
    raise TypeError(f"unknown matcher node: {node!r}")


def uses_git(node: MatcherNode) -> bool:
    """Return whether evaluating ``node`` may need git data."""
    if isinstance(node, GitChangedMatcher):
        return True
    if isinstance(node, (AllMatcher, AnyOfMatcher)):
        return any(uses_git(child) for child in node.children)
    if isinstance(node, NotMatcher):
        return uses_git(node.child)
    return False


# Compilation from configuration data.


def _expand_braces(pattern: str) -> list[str]:
    """Expand the first ``{a,b}`` group of a glob pattern, recursively."""
    start = pattern.find("{")
    if start < 0:
        if "}" in pattern:
            raise ConfigError(f"invalid glob {pattern!r}: unopened alternate group")
        return [pattern]
    depth = 0
    for index in range(start, len(pattern)):
        ch = pattern[index]
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                head, body, tail = pattern[:start], pattern[start + 1 : index], pattern[index + 1 :]
                if "}" in head:
                    raise ConfigError(f"invalid glob {pattern!r}: unopened alternate group")
                options = _split_alternates(body)
                expanded: list[str] = []
                for option in options:
                    expanded.extend(_expand_braces(head + option + tail))
                return expanded
    raise ConfigError(f"invalid glob {pattern!r}: unclosed alternate group")


def _split_alternates(body: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in body:
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        current.append(ch)
    parts.append("".join(current))
    return parts


def _check_character_classes(pattern: str) -> None:
    index = 0
    while index < len(pattern):
        if pattern[index] == "[":
            close = index + 1
            if close < len(pattern) and pattern[close] in "!^":
                close += 1
            if close < len(pattern) and pattern[close] == "]":
                close += 1
            close = pattern.find("]", close)
            if close < 0:
                raise ConfigError(f"invalid glob {pattern!r}: unclosed character class")
            index = close
        index += 1


def compile_glob(patterns: str | Sequence[str]) -> GlobMatcher:
    """Compile one or more glob patterns into an OR-matched name matcher."""
    if isinstance(patterns, str):
        patterns = [patterns]
    if not patterns:
        raise ConfigError("glob matcher needs at least one pattern")

    translated: list[str] = []
    for pattern in patterns:
        if not isinstance(pattern, str) or not pattern:
            raise ConfigError(f"invalid glob pattern: {pattern!r}")
        for expanded in _expand_braces(pattern):
            _check_character_classes(expanded)
            translated.append(fnmatch.translate(expanded))
    compiled = re.compile("|".join(f"(?:{item})" for item in translated))
    return GlobMatcher(patterns=tuple(patterns), compiled=compiled)


def compile_regex(pattern: object) -> RegexMatcher:
    if not isinstance(pattern, str):
        raise ConfigError(f"regex matcher needs a string, got {pattern!r}")
    source = _REGEX_END_OF_TEXT_RE.sub(r"\1\\Z", pattern)
    try:
        compiled = re.compile(source)
    except re.error as exc:
        raise ConfigError(f"invalid regex {pattern!r}: {exc}") from exc
    return RegexMatcher(pattern=pattern, compiled=compiled)


def _compile_changes(value: object) -> MatcherNode:
    if value == "git":
        return GitChangedMatcher()
    try:
        seconds = parse_duration(value)
    except ConfigError as exc:
        raise ConfigError(f"invalid 'changes' matcher: {exc}") from exc
    return ChangedWithinMatcher(seconds=seconds)


def _compile_type(value: object) -> TypeMatcher:
    if not isinstance(value, str) or value not in MATCHER_TYPES:
        expected = ", ".join(sorted(MATCHER_TYPES))
        raise ConfigError(f"unknown file type {value!r} (expected one of: {expected})")
    return TypeMatcher(kind=value)


def _compile_mime(value: object) -> MimeMatcher:
    if not isinstance(value, str) or value not in MIME_CATEGORIES:
        expected = ", ".join(sorted(MIME_CATEGORIES))
        raise ConfigError(f"unknown MIME category {value!r} (expected one of: {expected})")
    return MimeMatcher(category=value)


def compile_matcher(data: object) -> MatcherNode:
    """Compile one matcher from parsed YAML data.

    Accepts ``"any"``, ``{"any": None}``, or a single-key mapping naming the
    matcher kind. A list compiles to an implicit OR.
    """
    if isinstance(data, list):
        return compile_matcher_list(data)
    if data == "any":
        return AnyMatcher()
    if isinstance(data, str):
        raise ConfigError(f"unknown matcher: {data!r}")
    if not isinstance(data, dict) or len(data) != 1:
        raise ConfigError(f"a matcher must be a mapping with a single key, got {data!r}")

    (kind, value), = data.items()
    if kind == "any":
        if value is not None:
            raise ConfigError("'any' matcher takes no value")
        return AnyMatcher()
    if kind == "all":
        if not isinstance(value, list):
            raise ConfigError("'all' matcher needs a list of matchers")
        return AllMatcher(children=tuple(compile_matcher(item) for item in value))
    if kind == "not":
        return NotMatcher(child=compile_matcher(value))
    if kind == "changes":
        return _compile_changes(value)
    if kind == "glob":
        if not isinstance(value, (str, list)):
            raise ConfigError(f"'glob' matcher needs a pattern or a list of patterns, got {value!r}")
        return compile_glob(value)
    if kind == "regex":
        return compile_regex(value)
    if kind == "mime":
        return _compile_mime(value)
    if kind == "type":
        return _compile_type(value)
    raise ConfigError(f"unknown matcher: {kind!r}")


def compile_matcher_list(data: object) -> AnyOfMatcher:
    """Compile a ``matchers:``/``exclude:`` field (a list or a single matcher)."""
    if data is None:
        return NEVER
    items = data if isinstance(data, list) else [data]
    return AnyOfMatcher(children=tuple(compile_matcher(item) for item in items))


def matcher_to_data(node: MatcherNode) -> object:
    """Inverse of :func:`compile_matcher`, used to dump configuration."""
    if isinstance(node, AnyMatcher):
        return "any"
    if isinstance(node, AnyOfMatcher):
        return [matcher_to_data(child) for child in node.children]
    if isinstance(node, AllMatcher):
        return {"all": [matcher_to_data(child) for child in node.children]}
    if isinstance(node, NotMatcher):
        return {"not": matcher_to_data(node.child)}
    if isinstance(node, GlobMatcher):
        patterns = list(node.patterns)
        return {"glob": patterns[0] if len(patterns) == 1 else patterns}
    if isinstance(node, RegexMatcher):
        return {"regex": node.pattern}
    if isinstance(node, MimeMatcher):
        return {"mime": node.category}
    if isinstance(node, TypeMatcher):
        return {"type": node.kind}
    if isinstance(node, ChangedWithinMatcher):
        return {"changes": format_duration(node.seconds)}
    if isinstance(node, GitChangedMatcher):
        return {"changes": "git"}
    raise TypeError(f"unknown matcher node: {node!r}")


__all__ = [
    "TYPE_EXECUTABLE",
    "MATCHER_TYPES",
    "AnyMatcher",
    "AllMatcher",
    "AnyOfMatcher",
    "NotMatcher",
    "GlobMatcher",
    "RegexMatcher",
    "MimeMatcher",
    "TypeMatcher",
    "ChangedWithinMatcher",
    "GitChangedMatcher",
    "MatcherNode",
    "NEVER",
    "MatchContext",
    "evaluate",
    "uses_git",
    "compile_glob",
    "compile_regex",
    "compile_matcher",
    "compile_matcher_list",
    "matcher_to_data",
]
