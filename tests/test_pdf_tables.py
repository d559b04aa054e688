import pytest

from memory_screen.extraction import pdf_tables


@pytest.mark.parametrize(
    "spec, expected",
    [
        ("5", [5]),
        ("13-16", [13, 14, 15, 16]),
        ("1, 3, 5-6", [1, 3, 5, 6]),
        ("2,2,3", [2, 3]),
        (7, [7]),
        (range(3, 5), [3, 4]),
    ],
)
def test_parse_pages(spec, expected):
    assert pdf_tables.parse_pages(spec) == expected


@pytest.mark.parametrize("spec", ["", "0", "5-3", "a-b", "x"])
def test_parse_pages_rejects_bad_ranges(spec):
    with pytest.raises(ValueError):
        pdf_tables.parse_pages(spec)


def test_extract_tables_reads_requested_pages_in_order(fake_pdf):
    pdf_path = fake_pdf(
        [
            [[["a", "b"]]],
            [],
            [[["c", None], ["d", "e"]], [["f"]]],
        ]
    )
    matrices = pdf_tables.extract_tables(pdf_path, "1-3")
    assert matrices == [[["a", "b"]], [["c", None], ["d", "e"]], [["f"]]]


def test_extract_tables_skips_page_without_table(fake_pdf, caplog):
    pdf_path = fake_pdf([[], [[["x"]]]])
    with caplog.at_level("WARNING"):
        matrices = pdf_tables.extract_tables(pdf_path, [1, 2])
    assert matrices == [[["x"]]]
    assert "No table found on page 1" in caplog.text


def test_extract_tables_page_out_of_range(fake_pdf):
    pdf_path = fake_pdf([[[["x"]]]])
    with pytest.raises(ValueError, match="out of range"):
        pdf_tables.extract_tables(pdf_path, [2])


def test_extract_tables_missing_pdf(tmp_path):
    with pytest.raises(FileNotFoundError):
        pdf_tables.extract_tables(tmp_path / "missing.pdf", [1])


def test_raw_tables_saved_as_json(tmp_path):
    path = tmp_path / "tables.json"
    matrices = [[["101", None, "0.12 ± 0.03"]]]
    pdf_tables.write_raw_tables(matrices, path)
    assert pdf_tables.read_raw_tables(path) == matrices
