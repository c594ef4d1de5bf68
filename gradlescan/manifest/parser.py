"""Parser for Gradle build files (build.gradle.kts / build.gradle).

Understands the declarative subset that dependency analysis needs:

  - plugins { id("java") }
  - group = "org.acme" / version = "1.0.0"
  - repositories { mavenCentral(); maven { url = uri("...") } }
  - dependencies {
        implementation("group:artifact:version")
        implementation "group:artifact:version"
        implementation(group: "g", name: "a", version: "v")   // exhortignore
        implementation(libs.foo.bar)                          (needs a catalog)
    }

Anything else at the top level (tasks.test { ... }, java { ... }) is skipped.
Parsing is all-or-nothing: the first bad declaration raises and no
Manifest is returned.
"""

from __future__ import annotations

import re
from pathlib import Path

import structlog

from gradlescan.exceptions import (
    DuplicateDependencyError,
    MalformedManifestError,
    ManifestError,
    MissingDependenciesBlockError,
    UnsupportedDeclarationFormError,
)
from gradlescan.manifest.catalog import VersionCatalog
from gradlescan.manifest.models import (
    FORM_CATALOG,
    FORM_NAMED,
    FORM_STRING,
    Coordinate,
    Dependency,
    Manifest,
)

log = structlog.get_logger("gradlescan.parser")

# Gradle configuration names (not exhaustive, but covers the common ones)
_CONFIG_RE = re.compile(
    r"(?:implementation|api|compileOnly|compileOnlyApi|runtimeOnly|"
    r"annotationProcessor|kapt|ksp|classpath|developmentOnly|"
    r"testImplementation|testCompileOnly|testRuntimeOnly|testAnnotationProcessor|"
    r"androidTestImplementation|debugImplementation|releaseImplementation|"
    r"optional|provided|compile|runtime|testCompile|testRuntime|"
    r"\w+Implementation|\w+Api|\w+CompileOnly|\w+RuntimeOnly)"
)

# configuration + the rest of the declaration
_DECL_RE = re.compile(r"^(?P<config>[A-Za-z_]\w*)\s*(?P<args>.*)$")

# "group:artifact:version" as the whole argument
_STRING_ARG_RE = re.compile(r"""^(["'])(?P<value>[^"']*)\1$""")

# group: "g" / group = "g"
_NAMED_ARG_RE = re.compile(r"""(?P<key>\w+)\s*[:=]\s*(["'])(?P<value>[^"']*)\2""")
_NAMED_KEYS = {"group", "name", "version"}
_NAMED_EXTRA_KEYS = {"classifier", "ext"}

_CATALOG_ARG_RE = re.compile(r"^libs\.(?P<alias>[A-Za-z_][\w.]*)$")

_ASSIGN_RE = re.compile(r"""^(?P<key>group|version)\s*=?\s*(["'])(?P<value>[^"']*)\2$""")

_PLUGIN_ID_RE = re.compile(r"""^id\s*\(?\s*(["'])(?P<id>[^"']+)\1""")
_PLUGIN_KOTLIN_RE = re.compile(r"""^kotlin\s*\(\s*(["'])(?P<id>[^"']+)\1\s*\)""")
_PLUGIN_ALIAS_RE = re.compile(r"^alias\s*\(\s*(?P<ref>libs\.plugins\.[\w.]+)\s*\)")
_PLUGIN_BARE_RE = re.compile(r"^(?:`(?P<quoted>[^`]+)`|(?P<bare>[A-Za-z][\w-]*))$")
_APPLY_PLUGIN_RE = re.compile(r"""^apply\s*\(?\s*plugin\s*[:=]\s*(["'])(?P<id>[^"']+)\1""")

_REPO_NAMED_RE = re.compile(
    r"\b(?P<name>mavenCentral|mavenLocal|google|gradlePluginPortal|jcenter)\s*\(\s*\)"
)
_REPO_MAVEN_CALL_RE = re.compile(
    r"""\bmaven\s*\(\s*(?:url\s*=\s*)?(?:uri\s*\(\s*)?(["'])(?P<url>[^"']+)\1"""
)
_REPO_URL_RE = re.compile(
    r"""\b(?:url|setUrl)\s*(?:=\s*|\(\s*)?(?:uri\s*\(\s*)?(["'])(?P<url>[^"']+)\1"""
)

_LEADING_NAME_RE = re.compile(r"^([A-Za-z_][\w.]*)")
_BARE_NAME_RE = re.compile(r"^[A-Za-z_]\w*$")
_TOKEN_RE = re.compile(r"[\w.-]+")


def _split_code_and_comment(text: str) -> list[tuple[str, str]]:
    """Split every line into (code, trailing // comment), dropping /* */ comments.

    Quote-aware, so the ``//`` in ``"https://..."`` is not a comment.
    """
    lines: list[tuple[str, str]] = []
    in_block = False
    for raw in text.splitlines():
        code: list[str] = []
        comment = ""
        quote: str | None = None
        i = 0
        while i < len(raw):
            ch = raw[i]
            if in_block:
                if raw.startswith("*/", i):
                    in_block = False
                    i += 2
                else:
                    i += 1
                continue
            if quote:
                code.append(ch)
                if ch == "\\" and i + 1 < len(raw):
                    code.append(raw[i + 1])
                    i += 2
                    continue
                if ch == quote:
                    quote = None
                i += 1
                continue
            if ch in "\"'":
                quote = ch
            elif raw.startswith("//", i):
                comment = raw[i + 2 :]
                break
            elif raw.startswith("/*", i):
                in_block = True
                i += 2
                continue
            code.append(ch)
            i += 1
        lines.append(("".join(code), comment))
    return lines


def _braces(code: str) -> tuple[int, int, int]:
    """Return (opens, closes, index of first brace) counting only braces outside strings."""
    opens = closes = 0
    first = -1
    quote: str | None = None
    escaped = False
    for i, ch in enumerate(code):
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            continue
        if ch in "\"'":
            quote = ch
        elif ch in "{}":
            if first < 0:
                first = i
            if ch == "{":
                opens += 1
            else:
                closes += 1
    return opens, closes, first


def _split_statements(code: str) -> list[str]:
    """Split *code* on ``;`` outside string literals, dropping empty parts."""
    parts: list[str] = []
    start = 0
    quote: str | None = None
    escaped = False
    for i, ch in enumerate(code):
        if quote:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
        elif ch in "\"'":
            quote = ch
        elif ch == ";":
            parts.append(code[start:i])
            start = i + 1
    parts.append(code[start:])
    return [p.strip() for p in parts if p.strip()]


def _annotations(comment: str) -> frozenset[str]:
    return frozenset(_TOKEN_RE.findall(comment.lower()))


def _unwrap_args(args: str) -> str:
    args = args.strip().rstrip(";").strip()
    if args.startswith("(") and args.endswith(")"):
        return args[1:-1].strip()
    return args


class _ManifestBuilder:
    """Accumulates one parse; discarded once the Manifest is built."""

    def __init__(self, catalog: VersionCatalog | None, allow_duplicates: bool):
        self.catalog = catalog
        self.allow_duplicates = allow_duplicates
        self.group: str | None = None
        self.version: str | None = None
        self.plugins: list[str] = []
        self.repositories: set[str] = set()
        self.dependencies: list[Dependency] = []
        self.seen_blocks: set[str] = set()
        self._first_seen: dict[tuple[str, str, str], int] = {}

    # ── top level ───────────────────────────────────────────────────────

    def top_level(self, statement: str) -> None:
        m = _ASSIGN_RE.match(statement)
        if m:
            setattr(self, m.group("key"), m.group("value"))
            return
        m = _APPLY_PLUGIN_RE.match(statement)
        if m:
            self._add_plugin(m.group("id"))

    def in_block(
        self,
        block: str | None,
        statement: str,
        code: str,
        comment: str,
        lineno: int,
        opens_block: bool = False,
    ) -> None:
        """Handle a statement that sits directly inside a top-level block."""
        if block == "plugins":
            for part in _split_statements(statement):
                self.plugin(part, lineno)
        elif block == "repositories":
            self.repository(code)
        elif block == "dependencies":
            parts = _split_statements(statement)
            # constraints { ... } and similar nested blocks are not declarations
            if (
                opens_block
                and parts
                and _BARE_NAME_RE.match(parts[-1])
                and not _CONFIG_RE.fullmatch(parts[-1])
            ):
                parts.pop()
            for part in parts:
                self.dependency(part, comment, lineno)

    # ── plugins ─────────────────────────────────────────────────────────

    def plugin(self, statement: str, lineno: int) -> None:
        for regex in (_PLUGIN_ID_RE, _APPLY_PLUGIN_RE):
            m = regex.match(statement)
            if m:
                self._add_plugin(m.group("id"))
                return
        m = _PLUGIN_KOTLIN_RE.match(statement)
        if m:
            self._add_plugin(f"org.jetbrains.kotlin.{m.group('id')}")
            return
        m = _PLUGIN_ALIAS_RE.match(statement)
        if m:
            self._add_plugin(m.group("ref"))
            return
        m = _PLUGIN_BARE_RE.match(statement)
        if m:
            self._add_plugin(m.group("quoted") or m.group("bare"))
            return
        raise MalformedManifestError("unrecognized plugin declaration", lineno, statement)

    def _add_plugin(self, plugin_id: str) -> None:
        if plugin_id not in self.plugins:
            self.plugins.append(plugin_id)

    # ── repositories ────────────────────────────────────────────────────

    def repository(self, code: str) -> None:
        for m in _REPO_NAMED_RE.finditer(code):
            self.repositories.add(m.group("name"))
        for regex in (_REPO_MAVEN_CALL_RE, _REPO_URL_RE):
            for m in regex.finditer(code):
                self.repositories.add(m.group("url"))

    # ── dependencies ────────────────────────────────────────────────────

    def dependency(self, statement: str, comment: str, lineno: int) -> None:
        m = _DECL_RE.match(statement)
        if not m or not _CONFIG_RE.fullmatch(m.group("config")):
            raise UnsupportedDeclarationFormError(
                "not a dependency declaration", lineno, statement
            )

        configuration = m.group("config")
        args = _unwrap_args(m.group("args"))
        coordinate, form = self._coordinate(args, statement, lineno)

        key = (configuration, coordinate.group, coordinate.artifact)
        first = self._first_seen.get(key)
        if first is None:
            self._first_seen[key] = lineno
        else:
            if not self.allow_duplicates:
                raise DuplicateDependencyError(
                    f"{coordinate.group}:{coordinate.artifact}", configuration, lineno, first
                )
            log.debug(
                "parser.duplicate_dependency",
                coordinate=coordinate.notation,
                configuration=configuration,
                line=lineno,
                first_line=first,
            )

        self.dependencies.append(
            Dependency(
                configuration=configuration,
                coordinate=coordinate,
                form=form,
                annotations=_annotations(comment),
                line=lineno,
            )
        )

    def _coordinate(self, args: str, statement: str, lineno: int) -> tuple[Coordinate, str]:
        m = _STRING_ARG_RE.match(args)
        if m:
            return self._from_notation(m.group("value"), statement, lineno), FORM_STRING

        if _NAMED_ARG_RE.search(args):
            return self._from_named(args, statement, lineno), FORM_NAMED

        m = _CATALOG_ARG_RE.match(args)
        if m:
            if self.catalog is None:
                raise UnsupportedDeclarationFormError(
                    "version catalog reference without a libs.versions.toml", lineno, statement
                )
            try:
                return self.catalog.resolve(m.group("alias")), FORM_CATALOG
            except ManifestError as exc:
                raise MalformedManifestError(str(exc), lineno, statement) from exc

        raise UnsupportedDeclarationFormError(
            "expected a 'group:artifact:version' string or group/name/version arguments",
            lineno,
            statement,
        )

    @staticmethod
    def _from_notation(value: str, statement: str, lineno: int) -> Coordinate:
        if "$" in value:
            raise UnsupportedDeclarationFormError(
                "string templates in coordinates are not supported", lineno, statement
            )
        parts = [p.strip() for p in value.split(":")]
        if len(parts) != 3 or not all(parts):
            raise MalformedManifestError(
                "coordinate must be 'group:artifact:version'", lineno, statement
            )
        return Coordinate(*parts)

    @staticmethod
    def _from_named(args: str, statement: str, lineno: int) -> Coordinate:
        values: dict[str, str] = {}
        for m in _NAMED_ARG_RE.finditer(args):
            key = m.group("key")
            if key not in _NAMED_KEYS and key not in _NAMED_EXTRA_KEYS:
                raise UnsupportedDeclarationFormError(
                    f"unsupported named argument '{key}'", lineno, statement
                )
            values[key] = m.group("value").strip()

        # Everything that is not a key/value pair must be separators.
        leftover = _NAMED_ARG_RE.sub("", args).replace(",", "").strip()
        if leftover:
            raise UnsupportedDeclarationFormError(
                "named arguments must all be string literals", lineno, statement
            )

        missing = [k for k in ("group", "name", "version") if not values.get(k)]
        if missing:
            raise MalformedManifestError(
                f"missing {', '.join(missing)} in named declaration", lineno, statement
            )
        if "$" in values["version"]:
            raise UnsupportedDeclarationFormError(
                "string templates in coordinates are not supported", lineno, statement
            )
        return Coordinate(values["group"], values["name"], values["version"])

    def build(self, source: str | None) -> Manifest:
        return Manifest(
            group=self.group,
            version=self.version,
            plugins=tuple(self.plugins),
            repositories=frozenset(self.repositories),
            dependencies=tuple(self.dependencies),
            source=source,
        )


def parse(
    text: str,
    *,
    catalog: VersionCatalog | None = None,
    allow_duplicates: bool = True,
    source: str | None = None,
) -> Manifest:
    """Parse Gradle build script *text* into a :class:`Manifest`.

    *catalog* resolves ``libs.<alias>`` dependency notation; without one such
    declarations raise :class:`UnsupportedDeclarationFormError`.
    Duplicate group:artifact pairs within a configuration are kept unless
    *allow_duplicates* is False, in which case they raise
    :class:`DuplicateDependencyError`.

    Raises :class:`MalformedManifestError` for structural problems.
    """
    builder = _ManifestBuilder(catalog, allow_duplicates)

    depth = 0
    block: str | None = None
    block_line = 0

    for lineno, (code, comment) in enumerate(_split_code_and_comment(text), start=1):
        stripped = code.strip()
        if not stripped:
            continue

        opens, closes, first_brace = _braces(code)
        head = (code[:first_brace] if first_brace >= 0 else code).strip()

        if depth == 0:
            if opens and first_brace >= 0 and code[first_brace] == "{":
                m = _LEADING_NAME_RE.match(head)
                block = m.group(1) if m else head
                block_line = lineno
                builder.seen_blocks.add(block)
                # One-liner: repositories { mavenCentral() }
                body = code[first_brace + 1 :]
                if opens == closes and "}" in body:
                    body = body[: body.rfind("}")]
                body = body.strip()
                if body:
                    body_opens, _, body_brace = _braces(body)
                    body_head = (body[:body_brace] if body_brace >= 0 else body).strip()
                    if body_head:
                        builder.in_block(
                            block, body_head, body, comment, lineno, opens_block=body_opens > 0
                        )
            elif closes:
                raise MalformedManifestError("unbalanced '}'", lineno, stripped)
            else:
                builder.top_level(stripped.rstrip(";").strip())
        elif depth == 1:
            if head:
                opens_block = first_brace >= 0 and code[first_brace] == "{"
                builder.in_block(block, head, code, comment, lineno, opens_block=opens_block)
        elif block == "repositories":
            builder.repository(code)

        depth += opens - closes
        if depth < 0:
            raise MalformedManifestError("unbalanced '}'", lineno, stripped)
        if depth == 0:
            block = None

    if depth != 0:
        raise MalformedManifestError(f"block '{block}' is never closed", block_line)
    if "dependencies" not in builder.seen_blocks:
        raise MissingDependenciesBlockError()

    manifest = builder.build(source)
    log.debug(
        "parser.manifest_parsed",
        source=source,
        dependencies=len(manifest.dependencies),
        plugins=len(manifest.plugins),
        repositories=len(manifest.repositories),
    )
    return manifest


def parse_file(
    path: Path | str,
    *,
    catalog: VersionCatalog | None = None,
    allow_duplicates: bool = True,
) -> Manifest:
    """Parse a build file; picks up ``gradle/libs.versions.toml`` next to it if present.

    The file must be valid UTF-8; anything else raises :class:`MalformedManifestError`.
    """
    path = Path(path)
    if catalog is None:
        catalog = VersionCatalog.for_manifest(path)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedManifestError(f"{path} is not valid UTF-8: {exc.reason}") from exc
    return parse(
        text,
        catalog=catalog,
        allow_duplicates=allow_duplicates,
        source=str(path),
    )
