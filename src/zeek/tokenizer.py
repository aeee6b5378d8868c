"""Lexer for zsh command lines.

Splits a command line into classified tokens whose categories follow the
zsh-syntax-highlighting main highlighter (``command``, ``builtin``,
``single-quoted-argument`` ...), so user styles written for that plugin
apply unchanged.

This is a single forward pass with no backtracking. The only context kept
between words is whether the next word sits in command position. The lexer
never raises: unterminated quotes become ``*-unclosed`` tokens and any
character nothing else claims becomes a one-character ``unknown-token``.

Known approximations:

* no alias, function or hashed-command lookup (needs a running shell)
* ``path`` is a prefix heuristic (``/``, ``./``, ``../``, ``~/``), the
  filesystem is never touched
* reserved words are only recognised in command position, so ``in`` after
  ``for x`` is a plain argument
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, Literal

TokenCategory = Literal[
    "unknown-token",
    "reserved-word",
    "builtin",
    "command",
    "precommand",
    "commandseparator",
    "path",
    "glob",
    "history-expansion",
    "single-hyphen-option",
    "double-hyphen-option",
    "single-quoted-argument",
    "single-quoted-argument-unclosed",
    "double-quoted-argument",
    "double-quoted-argument-unclosed",
    "dollar-quoted-argument",
    "dollar-quoted-argument-unclosed",
    "back-quoted-argument",
    "back-quoted-argument-unclosed",
    "command-substitution",
    "process-substitution",
    "arithmetic-expansion",
    "assign",
    "redirection",
    "comment",
    "default",
]


@dataclass(frozen=True)
class Token:
    """A classified slice of the input. ``start`` and ``end`` are inclusive."""

    category: TokenCategory
    text: str
    start: int
    end: int


@dataclass
class LexerContext:
    """Scan state for one ``tokenize`` call."""

    line: str
    pos: int = 0
    expect_command: bool = True

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.line)

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.line[index] if index < len(self.line) else ""

    def startswith(self, prefix: str) -> bool:
        return self.line.startswith(prefix, self.pos)


@dataclass
class _Scan:
    text: str
    unclosed: bool = False


# ---------------------------------------------------------------------------
# Word lists
# ---------------------------------------------------------------------------

RESERVED_WORDS = frozenset(
    """if then else elif fi case esac for select while until do done in
    function time coproc [[ ]] { } ! foreach end repeat nocorrect always""".split()
)

BUILTINS = frozenset(
    """. : alias autoload bg bindkey break builtin bye cap cd chdir clone command
    comparguments compcall compctl compdescribe compfiles compgroups compquote
    comptags comptry compvalues continue declare dirs disable disown echo echotc
    echoti emulate enable eval exec exit export false fc fg float functions
    getcap getln getopts hash history integer jobs kill let limit local log
    logout noglob popd print printf pushd pushln pwd r read readonly rehash
    return sched set setcap setopt shift source stat suspend test times trap
    true ttyctl type typeset ulimit umask unalias unfunction unhash unlimit
    unset unsetopt vared wait whence where which zcompile zformat zftp zle
    zmodload zparseopts zprof zpty zregexparse zsocket zstyle ztcp""".split()
)

PRECOMMANDS = frozenset("builtin command exec nocorrect noglob pkexec sudo doas -".split())

# Longest first: "&>" must win over the "&" separator, ">>" over ">".
REDIRECTION_OPERATORS = (
    "&>>", "&>", "<<<", "<>", ">>!", ">>|", ">>", ">&", ">!", ">|", "<&", "<", ">",
)

COMMAND_SEPARATORS = (
    ";;", ";&", ";|", "&&", "||", "|&", "&!", "&|", ";", "|", "&",
)

WORD_TERMINATORS = frozenset(" \t\n;&|<>#")
EXTGLOB_MARKERS = "@?*+!"

_HISTORY_PATTERNS = (
    re.compile(r"!!"),
    re.compile(r"!\$"),
    re.compile(r"!\^"),
    re.compile(r"!\*"),
    re.compile(r"!-\d+"),
    re.compile(r"!\d+"),
    re.compile(r"!\?[^?]+\??"),
    re.compile(r"![a-zA-Z_][a-zA-Z0-9_]*"),
)

_ASSIGNMENT_RE = re.compile(r"[a-zA-Z_][a-zA-Z0-9_]*\+?=")
_FD_PREFIX_RE = re.compile(r"[0-9]*")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def tokenize(line: str) -> list[Token]:
    """Tokenize *line* into classified tokens, left to right."""
    ctx = LexerContext(line)
    tokens: list[Token] = []

    while not ctx.at_end:
        if ctx.peek().isspace():
            ctx.pos += 1
            continue

        if ctx.peek() == "#":
            tokens.append(_emit(ctx, "comment", line[ctx.pos:], expect_command=ctx.expect_command))
            break

        token = _scan_operator(ctx) or _scan_expansion(ctx) or _scan_quoted(ctx)
        if token is None:
            token = _scan_history_expansion(ctx)
        if token is None:
            token = _scan_word(ctx)
        if token is None:
            token = _emit(ctx, "unknown-token", ctx.peek(), expect_command=ctx.expect_command)
        tokens.append(token)

    return tokens


def iter_tokens(line: str) -> Iterator[Token]:
    """Yield the tokens of *line* one at a time."""
    yield from tokenize(line)


def first_token_category(line: str) -> TokenCategory | None:
    """Return the category of the first token of *line*, or ``None`` if blank."""
    tokens = tokenize(line.strip())
    return tokens[0].category if tokens else None


# ---------------------------------------------------------------------------
# Scanning steps
# ---------------------------------------------------------------------------


def _emit(ctx: LexerContext, category: TokenCategory, text: str, *, expect_command: bool) -> Token:
    token = Token(category, text, ctx.pos, ctx.pos + len(text) - 1)
    ctx.pos += len(text)
    ctx.expect_command = expect_command
    return token


def _scan_operator(ctx: LexerContext) -> Token | None:
    """Process substitutions, redirections and command separators."""
    if ctx.peek() in "<>" and ctx.peek(1) == "(":
        scan = _balanced(ctx.line, ctx.pos, ctx.pos + 2, depth=1)
        return _emit(ctx, "process-substitution", scan.text, expect_command=False)

    redirection = match_redirection(ctx.line, ctx.pos)
    if redirection:
        return _emit(ctx, "redirection", redirection, expect_command=False)

    separator = match_command_separator(ctx.line, ctx.pos)
    if separator:
        return _emit(ctx, "commandseparator", separator, expect_command=True)

    return None


def _scan_expansion(ctx: LexerContext) -> Token | None:
    """``$((...))`` and ``$(...)``."""
    if ctx.startswith("$(("):
        scan = _balanced(ctx.line, ctx.pos, ctx.pos + 3, depth=2, honor_escapes=True)
        return _emit(ctx, "arithmetic-expansion", scan.text, expect_command=False)

    if ctx.startswith("$("):
        scan = _balanced(ctx.line, ctx.pos, ctx.pos + 2, depth=1, skip_quotes=True)
        return _emit(ctx, "command-substitution", scan.text, expect_command=False)

    return None


def _scan_quoted(ctx: LexerContext) -> Token | None:
    """Dollar, single, double and back quoted arguments."""
    if ctx.startswith("$'"):
        scan = _quoted(ctx.line, ctx.pos, 2, "'", escapes=True)
        category: TokenCategory = "dollar-quoted-argument"
    elif ctx.peek() == "'":
        scan = _quoted(ctx.line, ctx.pos, 1, "'", escapes=False)
        category = "single-quoted-argument"
    elif ctx.peek() == '"':
        scan = _quoted(ctx.line, ctx.pos, 1, '"', escapes=True)
        category = "double-quoted-argument"
    elif ctx.peek() == "`":
        scan = _quoted(ctx.line, ctx.pos, 1, "`", escapes=True)
        category = "back-quoted-argument"
    else:
        return None

    if scan.unclosed:
        category = f"{category}-unclosed"  # type: ignore[assignment]
    return _emit(ctx, category, scan.text, expect_command=False)


def _scan_history_expansion(ctx: LexerContext) -> Token | None:
    if ctx.peek() != "!" or ctx.pos + 1 >= len(ctx.line):
        return None
    text = match_history_expansion(ctx.line, ctx.pos)
    if text is None:
        return None
    return _emit(ctx, "history-expansion", text, expect_command=False)


def _scan_word(ctx: LexerContext) -> Token | None:
    word = match_word(ctx.line, ctx.pos)
    if not word:
        return None
    category = classify_word(word, ctx.expect_command)
    if category == "precommand" or category == "assign":
        # "sudo cmd" and "VAR=x cmd": the next word is still a command.
        expect_command = True
    else:
        expect_command = False
    return _emit(ctx, category, word, expect_command=expect_command)


# ---------------------------------------------------------------------------
# Matchers
# ---------------------------------------------------------------------------


def match_command_separator(line: str, pos: int) -> str | None:
    for separator in COMMAND_SEPARATORS:
        if line.startswith(separator, pos):
            return separator
    return None


def match_redirection(line: str, pos: int) -> str | None:
    """Return the redirection at *pos*, including a leading fd number."""
    fd_prefix = _FD_PREFIX_RE.match(line, pos).group()
    operator_pos = pos + len(fd_prefix)
    for operator in REDIRECTION_OPERATORS:
        if line.startswith(operator, operator_pos):
            return fd_prefix + operator
    return None


def match_history_expansion(line: str, pos: int) -> str | None:
    for pattern in _HISTORY_PATTERNS:
        match = pattern.match(line, pos)
        if match:
            return match.group()
    return None


def _balanced(
    line: str,
    start: int,
    pos: int,
    depth: int,
    *,
    honor_escapes: bool = False,
    skip_quotes: bool = False,
) -> _Scan:
    """Scan from *pos* until the parenthesis depth drops to zero."""
    while pos < len(line) and depth > 0:
        ch = line[pos]
        if skip_quotes and ch in "'\"`":
            pos = _skip_quoted(line, pos + 1, ch)
            if pos < len(line):
                pos += 1
            continue
        escaped = honor_escapes and pos > 0 and line[pos - 1] == "\\"
        if ch == "(" and not escaped:
            depth += 1
        elif ch == ")" and not escaped:
            depth -= 1
        pos += 1
    return _Scan(line[start:pos], unclosed=depth > 0)


def _quoted(line: str, start: int, opener_len: int, quote: str, *, escapes: bool) -> _Scan:
    pos = start + opener_len
    while pos < len(line):
        ch = line[pos]
        if escapes and ch == "\\":
            pos += 2
            continue
        if ch == quote:
            return _Scan(line[start:pos + 1])
        pos += 1
    return _Scan(line[start:], unclosed=True)


def _skip_quoted(line: str, pos: int, quote: str) -> int:
    """Return the index of the closing *quote* (or ``len(line)``)."""
    while pos < len(line) and line[pos] != quote:
        if line[pos] == "\\" and quote != "'":
            pos += 1
        pos += 1
    return min(pos, len(line))


def match_word(line: str, pos: int) -> str:  # noqa: C901
    """Return the word at *pos*, consuming embedded quotes and substitutions."""
    start = pos
    while pos < len(line):
        ch = line[pos]
        if ch in WORD_TERMINATORS:
            break

        if ch in "()":
            # @(a|b), *(x), !(y) and a stray "$(" glue into the word.
            if ch == "(" and pos > start and line[pos - 1] in "$" + EXTGLOB_MARKERS:
                depth = 1
                pos += 1
                while pos < len(line) and depth > 0:
                    if line[pos] == "(":
                        depth += 1
                    elif line[pos] == ")":
                        depth -= 1
                    if depth > 0:
                        pos += 1
                if pos < len(line):
                    pos += 1
                continue
            break

        if ch in "'\"`":
            pos = _skip_quoted(line, pos + 1, ch)
            if pos < len(line):
                pos += 1
            continue

        if ch == "$" and line.startswith("'", pos + 1):
            pos += 2
            while pos < len(line) and line[pos] != "'":
                if line[pos] == "\\":
                    pos += 1
                pos += 1
            pos = min(pos, len(line))
            if pos < len(line):
                pos += 1
            continue

        if ch == "$" and line.startswith("(", pos + 1):
            pos = start + len(_balanced(line, start, pos + 2, depth=1).text)
            continue

        if ch == "\\" and pos + 1 < len(line):
            pos += 2
            continue

        pos += 1
    return line[start:pos]


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def classify_word(word: str, expect_command: bool) -> TokenCategory:
    """Classify a scanned word given whether it sits in command position."""
    if _ASSIGNMENT_RE.match(word):
        return "assign"
    if contains_glob(word):
        return "glob"
    if looks_like_path(word):
        return "path"

    if expect_command:
        if word in RESERVED_WORDS:
            return "reserved-word"
        if word in PRECOMMANDS:
            return "precommand"
        if word in BUILTINS:
            return "builtin"
        return "command"

    if word.startswith("--") and len(word) > 2:
        return "double-hyphen-option"
    if word.startswith("-") and len(word) > 1 and not word.startswith("--"):
        return "single-hyphen-option"
    return "default"


def contains_glob(word: str) -> bool:
    """True if *word* has a glob metacharacter outside quotes."""
    in_single = False
    in_double = False
    i = 0
    while i < len(word):
        ch = word[i]
        if ch == "\\" and not in_single:
            i += 2
            continue
        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif not in_single and not in_double:
            if ch in "*?":
                return True
            if ch == "[" and word.find("]", i + 1) != -1:
                return True
            if ch in EXTGLOB_MARKERS and word.startswith("(", i + 1):
                return True
        i += 1
    return False


def looks_like_path(word: str) -> bool:
    return word.startswith(("/", "./", "../", "~/"))
