import pytest

from services.document_parser import UnsupportedDocumentError, decode_text, extract_text


def test_utf8_with_bom():
    assert decode_text(b"\xef\xbb\xbf" + "张三\n".encode("utf-8")) == "张三"


def test_gbk_fallback():
    assert decode_text("教育背景：清华大学".encode("gbk")) == "教育背景：清华大学"


def test_markdown_is_plain_text():
    assert extract_text("# 张三\n技能：Java".encode("utf-8"), "Resume.MD") == "# 张三\n技能：Java"


def test_unsupported_extension():
    with pytest.raises(UnsupportedDocumentError):
        extract_text(b"data", "resume.docx")
