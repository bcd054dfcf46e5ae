"""YAML configuration loading and dumping.

The default file lives in the platform config directory
(``~/.config/summer/config.yaml`` on Linux). A missing default file means
built-in defaults; any problem in an existing file is a ``ConfigError``.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from platformdirs import user_config_dir

from ..display.styles import Style, parse_style
from ..durations import format_duration, parse_duration
from ..errors import ConfigError
from ..summarizer.matchers import compile_matcher_list, matcher_to_data
from ..summarizer.sorting import parse_sort_spec
from .model import (
    COLORS_WHEN,
    DEFAULT_COLUMN_PADDING,
    CollectorSpec,
    ColorsSpec,
    ColumnSpec,
    Config,
    GridSpec,
    Indicator,
    InfoContent,
    InfoSpec,
    StyleRule,
    default_columns,
)

logger = logging.getLogger(__name__)

APP_NAME = "summer"
CONFIG_FILENAME = "config.yaml"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

_ROOT_KEYS = ("columns", "include_hidden", "grid", "collector", "colors", "info")
_COLUMN_KEYS = (
    "label",
    "matchers",
    "exclude",
    "include_hidden",
    "max_name_width",
    "git_changes_first",
    "color",
    "sort",
)
_GRID_KEYS = ("max_rows", "max_name_width", "column_padding")
_COLLECTOR_KEYS = ("disk_usage", "git_diff", "timeout")
_COLORS_KEYS = (
    "when",
    "use_lscolors",
    "column_label",
    "name_ellipsis",
    "more_entries",
    "diff_added",
    "diff_deleted",
    "disk_usage",
    "styles",
    "style_files",
)
_STYLE_RULE_KEYS = ("matchers", "color", "indicator")
_TEXT_KEYS = ("text", "color")
_INFO_KEYS = ("left", "right", "column", "variables")


# Field validation helpers.


def _mapping(value: object, where: str, allowed: tuple[str, ...]) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"{where}: expected a mapping, got {type(value).__name__}")
    unknown = [str(key) for key in value if key not in allowed]
    if unknown:
        raise ConfigError(f"{where}: unknown key(s): {', '.join(unknown)} (expected: {', '.join(allowed)})")
    return value


def _bool(value: object, where: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ConfigError(f"{where}: expected true or false, got {value!r}")
    return value


def _positive_int(value: object, where: str) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{where}: expected a positive integer, got {value!r}")
    return value


def _non_negative_int(value: object, where: str, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ConfigError(f"{where}: expected a non-negative integer, got {value!r}")
    return value


def _style(value: object, where: str) -> Style | None:
    if value is None:
        return None
    try:
        return parse_style(value)
    except ConfigError as exc:
        raise ConfigError(f"{where}: {exc}") from exc


def _matchers(value: object, where: str):
    try:
        return compile_matcher_list(value)
    except ConfigError as exc:
        raise ConfigError(f"{where}: {exc}") from exc


def _text_with_color(value: object, where: str) -> tuple[str, Style | None] | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value, None
    data = _mapping(value, where, _TEXT_KEYS)
    text = data.get("text")
    if not isinstance(text, str):
        raise ConfigError(f"{where}.text: expected a string, got {text!r}")
    return text, _style(data.get("color"), f"{where}.color")


# Sections.


def _parse_column(value: object, where: str, include_hidden: bool) -> ColumnSpec:
    data = _mapping(value, where, _COLUMN_KEYS)
    if "matchers" not in data:
        raise ConfigError(f"{where}: missing required key: matchers")
    label = data.get("label")
    if label is not None and not isinstance(label, str):
        label = str(label)
    sort_value = data.get("sort")
    try:
        sort = parse_sort_spec(sort_value) if sort_value is not None else parse_sort_spec("name")
    except ConfigError as exc:
        raise ConfigError(f"{where}.sort: {exc}") from exc
    return ColumnSpec(
        matchers=_matchers(data["matchers"], f"{where}.matchers"),
        label=label,
        exclude=_matchers(data.get("exclude"), f"{where}.exclude"),
        include_hidden=_bool(data.get("include_hidden"), f"{where}.include_hidden", include_hidden),
        max_name_width=_positive_int(data.get("max_name_width"), f"{where}.max_name_width"),
        git_changes_first=_bool(data.get("git_changes_first"), f"{where}.git_changes_first", True),
        color=_style(data.get("color"), f"{where}.color"),
        sort=sort,
    )


def _parse_grid(value: object) -> GridSpec:
    data = _mapping(value, "grid", _GRID_KEYS)
    return GridSpec(
        max_rows=_positive_int(data.get("max_rows"), "grid.max_rows"),
        max_name_width=_positive_int(data.get("max_name_width"), "grid.max_name_width"),
        column_padding=_non_negative_int(data.get("column_padding"), "grid.column_padding", DEFAULT_COLUMN_PADDING),
    )


def _parse_collector(value: object) -> CollectorSpec:
    data = _mapping(value, "collector", _COLLECTOR_KEYS)
    timeout = CollectorSpec().timeout
    if "timeout" in data:
        raw = data["timeout"]
        try:
            timeout = None if raw is None else parse_duration(raw)
        except ConfigError as exc:
            raise ConfigError(f"collector.timeout: {exc}") from exc
    return CollectorSpec(
        disk_usage=_bool(data.get("disk_usage"), "collector.disk_usage", True),
        git_diff=_bool(data.get("git_diff"), "collector.git_diff", True),
        timeout=timeout,
    )


def _parse_style_rules(value: object, where: str) -> list[StyleRule]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ConfigError(f"{where}: expected a list of styles")
    rules: list[StyleRule] = []
    for index, item in enumerate(value):
        item_where = f"{where}[{index}]"
        data = _mapping(item, item_where, _STYLE_RULE_KEYS)
        if "matchers" not in data:
            raise ConfigError(f"{item_where}: missing required key: matchers")
        indicator = _text_with_color(data.get("indicator"), f"{item_where}.indicator")
        rules.append(
            StyleRule(
                matchers=_matchers(data["matchers"], f"{item_where}.matchers"),
                color=_style(data.get("color"), f"{item_where}.color"),
                indicator=Indicator(*indicator) if indicator is not None else None,
            )
        )
    return rules


def _parse_colors(value: object, base_dir: Path | None) -> ColorsSpec:
    data = _mapping(value, "colors", _COLORS_KEYS)
    defaults = ColorsSpec()

    when = data.get("when", defaults.when)
    if when not in COLORS_WHEN:
        raise ConfigError(f"colors.when: expected one of {', '.join(COLORS_WHEN)}, got {when!r}")

    use_lscolors = data.get("use_lscolors", True)
    if use_lscolors is None:
        use_lscolors = True
    if not isinstance(use_lscolors, (bool, str)):
        raise ConfigError(f"colors.use_lscolors: expected a boolean or a variable name, got {use_lscolors!r}")

    rules = _parse_style_rules(data.get("styles"), "colors.styles")

    style_files = data.get("style_files") or []
    if not isinstance(style_files, list):
        raise ConfigError("colors.style_files: expected a list of paths")
    for style_file in style_files:
        path = Path(str(style_file)).expanduser()
        if not path.is_absolute() and base_dir is not None:
            path = base_dir / path
        rules.extend(_parse_style_rules(_read_yaml(path), str(path)))

    def style_or_default(key: str) -> Style | None:
        if key in data:
            return _style(data[key], f"colors.{key}")
        return getattr(defaults, key)

    return ColorsSpec(
        when=when,
        use_lscolors=use_lscolors,
        column_label=style_or_default("column_label"),
        name_ellipsis=style_or_default("name_ellipsis"),
        more_entries=style_or_default("more_entries"),
        diff_added=style_or_default("diff_added"),
        diff_deleted=style_or_default("diff_deleted"),
        disk_usage=style_or_default("disk_usage"),
        styles=tuple(rules),
    )


def _parse_info(value: object) -> InfoSpec:
    data = _mapping(value, "info", _INFO_KEYS)

    def content(key: str) -> InfoContent | None:
        parsed = _text_with_color(data.get(key), f"info.{key}")
        return InfoContent(*parsed) if parsed is not None else None

    variables_data = data.get("variables") or {}
    if not isinstance(variables_data, dict):
        raise ConfigError("info.variables: expected a mapping of names to matchers")
    variables = {
        str(name): _matchers(matchers, f"info.variables.{name}")
        for name, matchers in variables_data.items()
    }
    return InfoSpec(
        left=content("left"),
        right=content("right"),
        column=content("column"),
        variables=variables,
    )


def config_from_data(data: object, base_dir: Path | None = None) -> Config:
    """Build a :class:`Config` from parsed YAML data."""
    root = _mapping(data, "configuration", _ROOT_KEYS)
    include_hidden = _bool(root.get("include_hidden"), "include_hidden", False)

    columns_data = root.get("columns")
    if columns_data is None:
        columns = default_columns(include_hidden)
    else:
        if not isinstance(columns_data, list):
            raise ConfigError("columns: expected a list of columns")
        columns = tuple(
            _parse_column(item, f"columns[{index}]", include_hidden)
            for index, item in enumerate(columns_data)
        )

    return Config(
        columns=columns,
        include_hidden=include_hidden,
        grid=_parse_grid(root.get("grid")),
        collector=_parse_collector(root.get("collector")),
        colors=_parse_colors(root.get("colors"), base_dir),
        info=_parse_info(root.get("info")),
    )


# Files.


def _format_yaml_error(path: Path, source: str, exc: yaml.YAMLError) -> str:
    mark = getattr(exc, "problem_mark", None)
    if mark is None:
        return f"{path}: {exc}"

    lines = source.splitlines()
    out = ["error: cannot parse configuration file.", "", f"   --> {path}"]
    if 0 <= mark.line < len(lines):
        line = lines[mark.line]
        column = min(mark.column, len(line))
        out.append("    |")
        out.append(f"{mark.line + 1:3} | {line}")
        out.append("    | " + " " * column + "^" * max(1, len(line) - column))
    problem = getattr(exc, "problem", None) or str(exc)
    out.append("")
    out.append(f"{problem} at line {mark.line + 1}, column {mark.column + 1}")
    return "\n".join(out)


def _read_yaml(path: Path) -> object:
    try:
        source = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"{path}: {exc.strerror or exc}") from exc
    except UnicodeDecodeError as exc:
        raise ConfigError(f"{path}: not valid UTF-8 ({exc.reason})") from exc
    try:
        return yaml.safe_load(source)
    except yaml.YAMLError as exc:
        raise ConfigError(_format_yaml_error(path, source, exc)) from exc


def load_config(path: Path) -> Config:
    """Load and validate the configuration file at ``path``.

    ``colors.style_files`` are read relative to the file's directory and
    their styles appended to ``colors.styles``.
    """
    path = Path(path).expanduser()
    data = _read_yaml(path)
    logger.debug("Loaded configuration from %s", path)
    try:
        return config_from_data(data, base_dir=path.parent)
    except ConfigError as exc:
        message = str(exc)
        if message.startswith(str(path)):
            raise
        raise ConfigError(f"{path}: {message}") from exc


def load_default_config() -> Config:
    """Load the user's configuration file, or built-in defaults when absent."""
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    logger.debug("No configuration file at %s; using defaults", DEFAULT_CONFIG_PATH)
    return Config()


# Dumping.


def _style_data(style: Style | None) -> str | None:
    if style is None:
        return None
    return style.source if style.source is not None else " ".join(style.params())


def _text_data(text: str, color: Style | None) -> object:
    if color is None:
        return text
    return {"text": text, "color": _style_data(color)}


def config_to_data(config: Config) -> dict:
    """Plain data for ``config`` that :func:`config_from_data` accepts back."""
    columns = []
    for column in config.columns:
        item: dict[str, object] = {}
        if column.label is not None:
            item["label"] = column.label
        item["matchers"] = matcher_to_data(column.matchers)
        exclude = matcher_to_data(column.exclude)
        if exclude:
            item["exclude"] = exclude
        item["include_hidden"] = column.include_hidden
        if column.max_name_width is not None:
            item["max_name_width"] = column.max_name_width
        item["git_changes_first"] = column.git_changes_first
        if column.color is not None:
            item["color"] = _style_data(column.color)
        item["sort"] = column.sort.to_text()
        columns.append(item)

    grid: dict[str, object] = {"column_padding": config.grid.column_padding}
    if config.grid.max_rows is not None:
        grid["max_rows"] = config.grid.max_rows
    if config.grid.max_name_width is not None:
        grid["max_name_width"] = config.grid.max_name_width

    colors_spec = config.colors
    colors: dict[str, object] = {"when": colors_spec.when, "use_lscolors": colors_spec.use_lscolors}
    for key in ("column_label", "name_ellipsis", "more_entries", "diff_added", "diff_deleted", "disk_usage"):
        value = getattr(colors_spec, key)
        if value is not None:
            colors[key] = _style_data(value)
    if colors_spec.styles:
        styles = []
        for rule in colors_spec.styles:
            rule_data: dict[str, object] = {"matchers": matcher_to_data(rule.matchers)}
            if rule.color is not None:
                rule_data["color"] = _style_data(rule.color)
            if rule.indicator is not None:
                rule_data["indicator"] = _text_data(rule.indicator.text, rule.indicator.color)
            styles.append(rule_data)
        colors["styles"] = styles

    info: dict[str, object] = {}
    for key in ("left", "right", "column"):
        content = getattr(config.info, key)
        if content is not None:
            info[key] = _text_data(content.text, content.color)
    if config.info.variables:
        info["variables"] = {name: matcher_to_data(node) for name, node in config.info.variables.items()}

    timeout = config.collector.timeout
    data: dict[str, object] = {
        "include_hidden": config.include_hidden,
        "columns": columns,
        "grid": grid,
        "collector": {
            "disk_usage": config.collector.disk_usage,
            "git_diff": config.collector.git_diff,
            "timeout": format_duration(timeout) if timeout is not None else None,
        },
        "colors": colors,
    }
    if info:
        data["info"] = info
    return data


def dump_config(config: Config) -> str:
    return yaml.safe_dump(config_to_data(config), sort_keys=False, allow_unicode=True)


__all__ = [
    "APP_NAME",
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG_PATH",
    "config_from_data",
    "load_config",
    "load_default_config",
    "config_to_data",
    "dump_config",
]
