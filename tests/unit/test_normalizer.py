"""Tests for the text normalizer."""

import pytest

from license_inventory.errors import EmptyInputError
from license_inventory.normalizer import TextNormalizer


class TestTextNormalizer:
    """Test suite for TextNormalizer."""

    def test_collapses_whitespace_and_lowercases(self, normalizer: TextNormalizer) -> None:
        result = normalizer.normalize("Permission  is\n\n  hereby\tGRANTED")

        assert result.text == "permission is hereby granted"
        assert result.original == "Permission is hereby GRANTED"

    def test_strips_shell_comments(self, normalizer: TextNormalizer) -> None:
        raw = "# Permission is granted\n#   to anyone\n##  obtaining a copy\n"

        result = normalizer.normalize(raw, source_type="shell")

        assert result.text == "permission is granted to anyone obtaining a copy"

    def test_strips_c_block_comments(self, normalizer: TextNormalizer) -> None:
        raw = "/*\n * Permission is granted\n * to anyone\n */\n"

        result = normalizer.normalize(raw, source_type="c")

        assert result.text == "permission is granted to anyone"

    def test_strips_c_line_comments(self, normalizer: TextNormalizer) -> None:
        raw = "// Permission is granted\n// to anyone\n"

        assert normalizer.normalize(raw, source_type="c").text == "permission is granted to anyone"

    def test_unknown_source_type_keeps_markers(self, normalizer: TextNormalizer) -> None:
        """Test that a source type without markers gets no comment stripping."""
        assert normalizer.normalize("# keep me", source_type="fortran").text == "# keep me"

    def test_no_source_type_keeps_markers(self, normalizer: TextNormalizer) -> None:
        assert normalizer.normalize("# keep me").text == "# keep me"

    @pytest.mark.parametrize(
        "line",
        [
            "Copyright (c) 2024 Jane Doe",
            "Copyright 2019-2021 The Project Authors",
            "COPYRIGHT (C) 1995 Someone",
            "Copyright <year> <copyright holders>",
            "Copyright: 2020 Acme",
            "(c) 2018 Acme Corp",
            "© 2018 Acme Corp",
            "Copyright",
        ],
    )
    def test_drops_copyright_lines(self, normalizer: TextNormalizer, line: str) -> None:
        result = normalizer.normalize(f"{line}\nPermission is granted")

        assert result.text == "permission is granted"

    def test_keeps_copyright_clauses(self, normalizer: TextNormalizer) -> None:
        """Test that license clauses mentioning copyright are not dropped."""
        raw = "Redistributions must retain the above\ncopyright notice, this list of conditions"

        result = normalizer.normalize(raw)

        assert "copyright notice, this list of conditions" in result.text

    def test_drops_commented_copyright_lines(self, normalizer: TextNormalizer) -> None:
        raw = " * Copyright (c) 2010 Someone\n * Permission is granted"

        assert normalizer.normalize(raw, source_type="c").text == "permission is granted"

    @pytest.mark.parametrize("raw", ["", "   \n\t\n", "Copyright (c) 2020 Jane Doe\n"])
    def test_empty_input_raises(self, normalizer: TextNormalizer, raw: str) -> None:
        with pytest.raises(EmptyInputError):
            normalizer.normalize(raw)

    def test_only_comment_markers_raises(self, normalizer: TextNormalizer) -> None:
        with pytest.raises(EmptyInputError):
            normalizer.normalize("/*\n *\n */", source_type="c")

    def test_empty_error_carries_label(self, normalizer: TextNormalizer) -> None:
        with pytest.raises(EmptyInputError) as exc_info:
            normalizer.normalize("", label="COPYING")

        assert exc_info.value.label == "COPYING"

    @pytest.mark.parametrize(
        "raw, source_type",
        [
            ("Permission  is\nhereby granted", None),
            ("# Permission is granted\n# to anyone", "shell"),
            ("/*\n * Copyright (c) 2001 X\n * Permission\n */", "c"),
            ("(c) Notice\n\n  THE SOFTWARE IS PROVIDED \"AS IS\"", None),
        ],
    )
    def test_idempotent(self, normalizer: TextNormalizer, raw: str, source_type) -> None:
        """Test that normalizing normalized text changes nothing."""
        once = normalizer.normalize(raw, source_type=source_type)
        twice = normalizer.normalize(once.text, source_type=source_type)

        assert twice.text == once.text

    def test_idempotent_on_corpus_texts(
        self, normalizer: TextNormalizer, license_texts: dict[str, str]
    ) -> None:
        for raw in license_texts.values():
            once = normalizer.normalize(raw).text
            assert normalizer.normalize(once).text == once

    def test_excerpt_uses_original_case(self, normalizer: TextNormalizer) -> None:
        result = normalizer.normalize("MIT License\nPermission")

        assert result.excerpt((0, 11)) == "MIT License"
