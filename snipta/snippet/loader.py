"""스니펫 파일 로더

- 편집기가 저장한 UTF-8 BOM은 떼어낸다(첫 Text 요소에 섞이지 않도록).
- 개행은 '\\n'으로 정규화한다.
"""

from __future__ import annotations
from pathlib    import Path

_BOM = "\ufeff"


def load_snippet_text(path: str) -> str:
    """
    Load Snippet Text
    """
    text = Path(path).read_text(encoding="utf-8")
    if text.startswith(_BOM):
        text = text[len(_BOM):]
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return text
