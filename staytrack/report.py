"""
Compliance report generation.

Creates a PDF (or plain text) summary of stays grouped by year, followed by
the 90/180 compliance status and any days over the limit.
"""

import logging
from collections import defaultdict
from datetime import datetime
from pathlib import Path

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

logger = logging.getLogger(__name__)


def stay_length(stay, reference_date):
    """Days in a stay, both ends included; ongoing stays run to reference_date."""
    end = stay.exit_date or reference_date
    return max(0, (end - stay.entry_date).days + 1)


def group_stays_by_year(stays):
    """Group stays by entry year.

    Returns:
        Dict of year -> list of stays sorted by entry date, in year order
    """
    stays_by_year = defaultdict(list)
    for stay in stays:
        stays_by_year[stay.entry_date.year].append(stay)

    return {
        year: sorted(stays_by_year[year], key=lambda s: s.entry_date)
        for year in sorted(stays_by_year)
    }


def _summary_lines(result):
    status = "COMPLIANT" if result.is_compliant else "NOT COMPLIANT"
    lines = [
        f"Status on {result.reference_date.isoformat()}: {status}",
        f"Schengen days used: {result.used_days}",
        f"Days remaining: {result.remaining_days}",
    ]
    if result.next_reset_date:
        lines.append(f"Next day returned: {result.next_reset_date.isoformat()}")
    return lines


def _stay_row(stay, reference_date, schengen_countries):
    in_schengen = "yes" if stay.country_code in schengen_countries else ""
    return [
        stay.entry_date.strftime("%b %d"),
        stay.exit_date.strftime("%b %d") if stay.exit_date else "ongoing",
        f"{stay.country_name} ({stay.country_code})",
        str(stay_length(stay, reference_date)),
        stay.purpose.value,
        in_schengen,
    ]


def generate_pdf_report(stays, result, output_path, schengen_countries=(), title="Schengen Stay Report"):
    """Generate a PDF report of stays and compliance status.

    Args:
        stays: List of StayPeriod
        result: ComplianceResult for the report's reference date
        output_path: Path to save the PDF
        schengen_countries: Codes to flag as Schengen in the stay table
        title: Title for the report

    Returns:
        Path to the generated PDF
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    schengen_countries = frozenset(schengen_countries)

    stays_by_year = group_stays_by_year(stays)

    doc = SimpleDocTemplate(
        str(output_path),
        pagesize=A4,
        rightMargin=0.5*inch,
        leftMargin=0.5*inch,
        topMargin=0.5*inch,
        bottomMargin=0.5*inch
    )

    styles = getSampleStyleSheet()

    title_style = ParagraphStyle(
        'CustomTitle',
        parent=styles['Heading1'],
        fontSize=22,
        spaceAfter=6,
        fontName='Helvetica-Bold',
        textColor=colors.HexColor('#1a1a1a'),
        alignment=1  # Center
    )

    subtitle_style = ParagraphStyle(
        'Subtitle',
        parent=styles['Normal'],
        fontSize=10,
        textColor=colors.HexColor('#666666'),
        alignment=1  # Center
    )

    section_style = ParagraphStyle(
        'SectionHeader',
        parent=styles['Heading2'],
        fontSize=14,
        spaceBefore=12,
        spaceAfter=6,
        fontName='Helvetica-Bold',
        textColor=colors.HexColor('#2c3e50')
    )

    status_color = '#1e7d32' if result.is_compliant else '#c62828'
    status_style = ParagraphStyle(
        'Status',
        parent=styles['Normal'],
        fontSize=11,
        leading=15,
        textColor=colors.HexColor(status_color),
    )

    story = []

    story.append(Paragraph(title, title_style))
    story.append(Spacer(1, 4))
    story.append(Paragraph(
        f"{len(stays)} stays  •  generated {datetime.now().strftime('%B %d, %Y')}",
        subtitle_style,
    ))
    story.append(Spacer(1, 18))

    # Compliance summary
    story.append(Paragraph("Compliance", section_style))
    for line in _summary_lines(result):
        story.append(Paragraph(line, status_style))
    story.append(Spacer(1, 12))

    table_style = TableStyle([
        # Header row
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, 0), 9),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.HexColor('#666666')),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 6),
        ('LINEBELOW', (0, 0), (-1, 0), 1, colors.HexColor('#cccccc')),
        # Data rows
        ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 1), (-1, -1), 9),
        ('TEXTCOLOR', (0, 1), (-1, -1), colors.HexColor('#333333')),
        ('TOPPADDING', (0, 1), (-1, -1), 4),
        ('BOTTOMPADDING', (0, 1), (-1, -1), 4),
        ('ALIGN', (0, 0), (-1, -1), 'LEFT'),
        ('LINEBELOW', (0, 1), (-1, -2), 0.5, colors.HexColor('#eeeeee')),
    ])

    for year, year_stays in stays_by_year.items():
        story.append(Paragraph(f"{year}", section_style))

        table_data = [['Entry', 'Exit', 'Country', 'Days', 'Purpose', 'Schengen']]
        for stay in year_stays:
            table_data.append(_stay_row(stay, result.reference_date, schengen_countries))

        table = Table(table_data, colWidths=[0.8*inch, 0.8*inch, 2.4*inch, 0.6*inch, 1.0*inch, 0.8*inch])
        table.setStyle(table_style)
        story.append(table)
        story.append(Spacer(1, 12))

    if result.violations:
        story.append(Paragraph(f"Days over the limit ({len(result.violations)})", section_style))
        table_data = [['Date', 'Over by', 'Detail']]
        for violation in result.violations:
            table_data.append([
                violation.date.isoformat(),
                str(violation.days_over_limit),
                violation.description,
            ])
        table = Table(table_data, colWidths=[1.0*inch, 0.7*inch, 4.7*inch])
        table.setStyle(table_style)
        story.append(table)

    doc.build(story)
    logger.info(f"PDF report written to {output_path}")
    return output_path


def generate_text_report(stays, result, output_path, schengen_countries=(), title="Schengen Stay Report"):
    """Generate a plain text report of stays and compliance status.

    Args:
        stays: List of StayPeriod
        result: ComplianceResult for the report's reference date
        output_path: Path to save the text file
        schengen_countries: Codes to flag as Schengen
        title: Title for the report

    Returns:
        Path to the generated file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    schengen_countries = frozenset(schengen_countries)

    lines = []
    lines.append("=" * 70)
    lines.append(f"  {title}")
    lines.append("=" * 70)
    lines.append(f"  Generated: {datetime.now().strftime('%B %d, %Y at %I:%M %p')}")
    lines.append(f"  Total Stays: {len(stays)}")
    lines.append("")
    for line in _summary_lines(result):
        lines.append(f"  {line}")

    for year, year_stays in group_stays_by_year(stays).items():
        lines.append("")
        lines.append("=" * 70)
        lines.append(f"  {year}  ({len(year_stays)} stays)")
        lines.append("=" * 70)
        lines.append("")

        for stay in year_stays:
            entry, exit_, country, days, purpose, schengen = _stay_row(
                stay, result.reference_date, schengen_countries
            )
            marker = " *" if schengen else ""
            lines.append(f"  {entry:<7} - {exit_:<8} {country:<30} {days:>4} days  {purpose}{marker}")

    if result.violations:
        lines.append("")
        lines.append(f"  Days over the limit: {len(result.violations)}")
        for violation in result.violations:
            lines.append(f"    {violation.date.isoformat()}  +{violation.days_over_limit}  {violation.description}")

    lines.append("")
    lines.append("=" * 70)

    with open(output_path, 'w', encoding='utf-8') as f:
        f.write('\n'.join(lines))
    return output_path
