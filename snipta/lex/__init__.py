# snipta/lex/__init__.py
"""snipta 매처(matcher) 프리미티브 — 스니펫 문법의 최소 어휘 단위.

특징
----
- 세 개의 고정 패턴을 import 시점에 **한 번만** 컴파일해 공유한다(읽기 전용).
  - `DIGITS` : `[0-9]+`                 (탭스톱/캡처 그룹 번호)
  - `IDENT`  : `[_a-zA-Z][_a-zA-Z0-9]*` (변수 이름)
  - `TEXT`   : `[^$]+`                  (`$`를 만나기 전까지의 자유 텍스트)
- 매칭은 항상 `pos`에 앵커되고 `end`로 상한이 걸린다. 입력 문자열을
  잘라내지(slice) 않고 오프셋만 사용한다.


API
---
- `match_prefix(rx, src, pos, end) -> int`
    비어 있지 않은 매치의 끝 오프셋, 실패하면 -1
"""

from __future__ import annotations
from typing import Optional
import regex as re


DIGITS = re.compile(r"[0-9]+")
IDENT = re.compile(r"[_a-zA-Z][_a-zA-Z0-9]*")
TEXT = re.compile(r"[^$]+")


def match_prefix(rx: "re.Pattern[str]", src: str, pos: int, end: Optional[int] = None) -> int:
    """`src[pos:end]` 앞부분에서 `rx`가 매치되는 끝 오프셋. 빈 매치는 실패로 본다."""
    if end is None:
        end = len(src)
    if pos >= end:
        return -1
    m = rx.match(src, pos, end)
    if m is None or m.end() == pos:
        return -1
    return m.end()
