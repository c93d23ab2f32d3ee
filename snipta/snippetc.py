# snipta/snippetc.py
"""snippetc – snipta CLI

사용 예)
    $ python -m snipta.snippetc parse --text 'match(${1:Arg1})'
    $ python -m snipta.snippetc check --input examples/func.snippet --strict -D

기능
----
- parse : 스니펫을 파싱해 최상위 요소를 한 줄씩 출력
- check : 파싱 가능 여부와 소비한 길이만 요약 출력

디버그 모드(-D/--debug)를 켜면 입력/소비 길이/요소 트리를 stderr로 출력합니다.
"""

from __future__ import annotations
import argparse
import sys
from typing import List, Optional, Tuple

# ------------------------------
# 헬퍼
# ------------------------------

def _eprint(*args, **kw) -> None:
    print(*args, file=sys.stderr, **kw)


def _read_input(args) -> str:
    if args.text is not None:
        return args.text
    from .snippet.loader import load_snippet_text
    return load_snippet_text(args.input)


def _kind(el) -> str:
    return type(el).__name__


def _describe(el) -> str:
    """요소 한 개를 `Kind 값` 형태의 짧은 문자열로."""
    from .snippet.ast import Tabstop, Placeholder, Choice, Variable, Text
    if isinstance(el, Text):
        return f"{el.text!r}"
    if isinstance(el, Tabstop):
        return f"${el.tabstop}"
    if isinstance(el, Placeholder):
        return f"${el.tabstop} = {_kind(el.value)} {_describe(el.value)}"
    if isinstance(el, Choice):
        return f"${el.tabstop} of {list(el.choices)!r}"
    if isinstance(el, Variable):
        out = el.name
        if el.default is not None:
            out += f" default={el.default!r}"
        if el.regex is not None:
            out += f" regex={el.regex.value!r} options={el.regex.options!r}"
        return out
    return repr(el)

# ------------------------------
# 파이프라인
# ------------------------------

def _load_pipeline(args) -> Tuple[str, list, int]:
    """입력을 읽고 파싱까지. strict면 남은 입력도 에러로 본다."""
    from .snippet.parser import parse_prefix, ParseError

    src = _read_input(args)
    if args.debug: _eprint("[DEBUG] input ready | chars=%d" % len(src))

    elements, consumed = parse_prefix(src)
    if args.debug: _eprint("[DEBUG] parsed | elements=%d consumed=%d/%d" %
                           (len(elements), consumed, len(src)))

    if consumed != len(src):
        if args.strict:
            raise ParseError(src, src[consumed:])
        _eprint(f"[WARN] trailing input ignored at offset {consumed}: {src[consumed:]!r}")
    return src, elements, consumed


def _print_tree(elements) -> None:
    _eprint("\n[AST]")
    for el in elements:
        _eprint("  " + repr(el))

# ------------------------------
# 커맨드 구현
# ------------------------------

def cmd_parse(args) -> int:
    from .snippet.parser import ParseError
    try:
        src, elements, consumed = _load_pipeline(args)
    except ParseError as e:
        _eprint("[PARSE ERROR]")
        _eprint(str(e))
        return 2
    except Exception as e:
        _eprint("[ERROR]", type(e).__name__, str(e))
        return 2

    if args.debug:
        _print_tree(elements)

    for i, el in enumerate(elements):
        print(f"{i:03d}: {_kind(el):<12} {_describe(el)}")
    return 0


def cmd_check(args) -> int:
    from .snippet.parser import ParseError
    try:
        src, elements, consumed = _load_pipeline(args)
    except ParseError as e:
        _eprint("[PARSE ERROR]")
        _eprint(str(e))
        return 2
    except Exception as e:
        _eprint("[ERROR]", type(e).__name__, str(e))
        return 2

    if args.debug:
        _print_tree(elements)

    print(f"[CHECK OK] elements={len(elements)} consumed={consumed}/{len(src)}")
    return 0

# ------------------------------
# 엔트리포인트
# ------------------------------

def _add_common(p: argparse.ArgumentParser) -> None:
    src_group = p.add_mutually_exclusive_group(required=True)
    src_group.add_argument("--text", help="직접 입력 텍스트")
    src_group.add_argument("--input", help="입력 스니펫 파일 경로")
    p.add_argument("--strict", action="store_true", help="입력 전체를 소비하지 못하면 에러")
    p.add_argument("-D", "--debug", action="store_true", help="디버그 정보를 상세 출력")


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="snippetc", description="snipta LSP snippet parser CLI")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_parse = sub.add_parser("parse", help="스니펫을 파싱해 요소 목록을 출력합니다")
    _add_common(p_parse)
    p_parse.set_defaults(func=cmd_parse)

    p_check = sub.add_parser("check", help="스니펫이 파싱되는지 검사합니다")
    _add_common(p_check)
    p_check.set_defaults(func=cmd_check)

    args = ap.parse_args(argv)
    return int(args.func(args))

if __name__ == "__main__":
    sys.exit(main())
