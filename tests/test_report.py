from datetime import date

from staytrack.models import TravelPurpose
from staytrack.report import generate_pdf_report, generate_text_report, group_stays_by_year, stay_length


def _stays(stay):
    return [
        stay("DE", date(2024, 1, 20), date(2024, 4, 20), purpose=TravelPurpose.BUSINESS),
        stay("FR", date(2023, 12, 20), date(2024, 1, 2), purpose=TravelPurpose.TOURISM),
        stay("GB", date(2024, 5, 1), date(2024, 5, 3)),
    ]


def test_stay_length(stay):
    assert stay_length(stay("FR", date(2024, 1, 1), date(2024, 1, 15)), date(2024, 2, 1)) == 15
    assert stay_length(stay("FR", date(2024, 1, 1)), date(2024, 1, 5)) == 5


def test_group_stays_by_year(stay):
    grouped = group_stays_by_year(_stays(stay))

    assert list(grouped) == [2023, 2024]
    assert [s.country_code for s in grouped[2024]] == ["DE", "GB"]


def test_text_report(tmp_path, stay, calculator):
    stays = _stays(stay)
    result = calculator.evaluate(stays, date(2024, 5, 10))

    path = generate_text_report(stays, result, tmp_path / "out" / "report.txt",
                                schengen_countries=calculator.schengen_countries)

    text = path.read_text(encoding="utf-8")
    assert "Status on 2024-05-10: NOT COMPLIANT" in text
    assert "France (FR)" in text
    assert "United Kingdom (GB)" in text
    assert "Days over the limit" in text
    germany = next(line for line in text.splitlines() if "Germany (DE)" in line)
    assert "92 days" in germany
    assert germany.endswith("business *")


def test_pdf_report(tmp_path, stay, calculator):
    stays = _stays(stay)
    result = calculator.evaluate(stays, date(2024, 5, 10))

    path = generate_pdf_report(stays, result, tmp_path / "report.pdf",
                               schengen_countries=calculator.schengen_countries)

    assert path.exists()
    assert path.read_bytes().startswith(b"%PDF")


def test_pdf_report_without_stays(tmp_path, calculator):
    result = calculator.evaluate([], date(2024, 5, 10))
    path = generate_pdf_report([], result, tmp_path / "empty.pdf")
    assert path.read_bytes().startswith(b"%PDF")
