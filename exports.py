# exports.py

import io
from html import escape

import numpy as np
import pandas as pd
import plotly.graph_objects as go
import plotly.io as pio
from pptx import Presentation
from pptx.util import Inches
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
# PDF export (with embedded chart images)
from reportlab.platypus import Image as RLImage
from reportlab.platypus import (ListFlowable, ListItem, Paragraph,
                                SimpleDocTemplate, Spacer, Table, TableStyle)

from config import CATEGORIES, CATEGORY_LABELS, CATEGORY_QUESTIONS, QUESTIONS
from scoring import score_answers

TITLE = "Business Sale Readiness Assessment"

# for chart sizes
RADAR_H = 360
BAR_H = 360
HEAT_H = 420

LABELS = [CATEGORY_LABELS[c] for c in CATEGORIES]
SLOTS = [f"Q{i}" for i in range(1, max(len(m) for m in CATEGORY_QUESTIONS.values()) + 1)]


def _base_fig_layout(fig, theme="light", height=360):
    """
    Apply a consistent layout to a figure.

    Contrasting font and grid colors for light/dark themes; axes follow the
    text color.

    :param fig: a figure to update
    :param theme: a string, either "light" or "dark"
    :param height: the height of the figure in pixels
    :return: the updated figure
    """
    font_color = "#f6f7fb" if theme == "dark" else "#0b1020"
    grid_color = "#334155" if theme == "dark" else "#CBD5E1"
    axis_color = font_color
    fig.update_layout(
        autosize=False,
        height=height,
        margin=dict(l=30, r=30, t=30, b=30),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color=font_color),
        xaxis=dict(
            showgrid=True,
            gridcolor=grid_color,
            zeroline=False,
            linecolor=axis_color,
            ticks="outside",
            fixedrange=True,
        ),
        yaxis=dict(
            showgrid=True,
            gridcolor=grid_color,
            zeroline=False,
            linecolor=axis_color,
            ticks="outside",
            fixedrange=True,
        ),
        uirevision="keep",
    )
    return fig


def _category_values(cat_scores):
    # Store payloads key categories by their string value.
    return [float(cat_scores.get(c.value, cat_scores.get(c, 0.0))) for c in CATEGORIES]


def radar_figure(cat_scores, theme="light"):
    """
    Radar of the six category means on a fixed 0-5 axis.

    Args:
        cat_scores (dict): category -> mean score
        theme (str, optional): light or dark. Defaults to "light".

    Returns:
        go.Figure: radar figure
    """
    vals = _category_values(cat_scores)
    cats2, vals2 = LABELS + [LABELS[0]], vals + [vals[0]]

    grid_color = "#334155" if theme == "dark" else "#CBD5E1"
    fig = go.Figure()
    fig.add_trace(
        go.Scatterpolar(
            r=vals2,
            theta=cats2,
            fill="toself",
            name="Readiness",
            line=dict(width=2),
            marker=dict(size=4),
            cliponaxis=True,
        )
    )
    fig.update_layout(
        autosize=False,
        height=RADAR_H,
        polar=dict(
            radialaxis=dict(
                range=[0, 5],
                autorange=False,
                tick0=0,
                dtick=1,
                gridcolor=grid_color,
                showline=True,
                linewidth=1,
            ),
            angularaxis=dict(gridcolor=grid_color, showline=True, linewidth=1),
        ),
        uirevision="keep",
    )
    return _base_fig_layout(fig, theme, height=RADAR_H)


def bar_figure(cat_scores, theme="light"):
    vals = _category_values(cat_scores)
    fig = go.Figure(go.Bar(x=LABELS, y=vals))
    fig.update_layout(
        autosize=False,
        height=BAR_H,
        xaxis=dict(categoryorder="array", categoryarray=LABELS, fixedrange=True),
        yaxis=dict(range=[0, 5], fixedrange=True, tick0=0, dtick=1),
        uirevision="keep",
    )
    return _base_fig_layout(fig, theme, height=BAR_H)


def score_matrix(answers):
    """
    Category x question-slot matrix of question scores. Slots a category does
    not have are NaN.

    :param answers: question key -> option token
    :return: pd.DataFrame indexed by category label, columns Q1..Q4
    """
    scores = score_answers(answers)
    z = np.full((len(CATEGORIES), len(SLOTS)), np.nan)
    for i, cat in enumerate(CATEGORIES):
        for j, key in enumerate(CATEGORY_QUESTIONS[cat]):
            z[i, j] = scores[key]
    return pd.DataFrame(z, index=LABELS, columns=SLOTS)


def heatmap_figure(answers, theme="light"):
    """
    Heatmap of per-question scores, one row per category.

    Args:
        answers (dict): question key -> option token
        theme (str, optional): light or dark. Defaults to "light".

    Returns:
        go.Figure: heatmap figure
    """
    pv = score_matrix(answers or {})
    z = pv.to_numpy()
    font_color = "#f6f7fb" if theme == "dark" else "#0b1020"
    muted = "#a9b0c4" if theme == "dark" else "#60646e"

    if not answers:
        z_display = np.zeros_like(z, dtype=float)
        showscale = False
        annotations = [
            dict(
                text="No answers yet",
                xref="paper",
                yref="paper",
                x=0.5,
                y=0.5,
                showarrow=False,
                font=dict(size=14, color=muted),
            )
        ]
        colorscale = (
            [[0, "#d8dde9"], [1, "#d8dde9"]]
            if theme == "light"
            else [[0, "#2a334f"], [1, "#2a334f"]]
        )
    else:
        z_display = z
        showscale = True
        annotations = []
        for i, label in enumerate(pv.index):
            for j, slot in enumerate(pv.columns):
                val = pv.iloc[i, j]
                if pd.notna(val):
                    annotations.append(
                        dict(
                            x=slot,
                            y=label,
                            text=f"{val:.0f}",
                            showarrow=False,
                            font=dict(size=11, color=font_color),
                        )
                    )
        colorscale = "Viridis"

    fig = go.Figure(
        data=go.Heatmap(
            z=z_display,
            x=list(pv.columns),
            y=list(pv.index),
            zmin=0,
            zmax=5,
            colorscale=colorscale,
            showscale=showscale,
            hovertemplate="Category: %{y}<br>Question: %{x}<br>Score: %{z:.0f}<extra></extra>",
            xgap=1,
            ygap=1,
        )
    )
    fig.update_layout(
        autosize=False,
        height=HEAT_H,
        xaxis=dict(title="", tickangle=0),
        yaxis=dict(title="", autorange="reversed"),
        annotations=annotations,
    )
    return _base_fig_layout(fig, theme, height=HEAT_H)


def empty_figure(theme="light", height=360):
    return _base_fig_layout(go.Figure(), theme, height=height)


# -------------- Tabular exports --------------------
def _option_label(question, token):
    for o in question["options"]:
        if o["value"] == token:
            return o["label"]
    return ""


def responses_frame(answers):
    """
    One row per question: key, category, question text, chosen answer label,
    raw token and score.
    """
    answers = answers or {}
    scores = score_answers(answers)
    rows = []
    for q in QUESTIONS:
        token = answers.get(q["key"], "")
        rows.append(
            {
                "key": q["key"],
                "category": CATEGORY_LABELS[q["category"]],
                "question": q["prompt"],
                "answer": _option_label(q, token),
                "token": token,
                "score": scores[q["key"]],
            }
        )
    return pd.DataFrame(rows)


def _rec_lines(report):
    return list(report.get("recommendations", []))


def write_ppt_bytes(buf, data):
    """
    Write a PowerPoint summary to a bytes buffer.

    1. Title slide with the business name.
    2. Summary: overall score, verbal assessment, readiness level.
    3. Category scores table.
    4. Recommendations.
    5. Per-category analysis table.

    Args:
        buf (BytesIO): buffer to write the presentation to.
        data (dict): {"business", "answers", "report"} with report as Report.to_dict().
    """
    report = data.get("report") or {}
    cat_scores = report.get("category_scores", {})
    analysis = report.get("category_analysis", {})

    prs = Presentation()
    slide = prs.slides.add_slide(prs.slide_layouts[0])
    slide.shapes.title.text = TITLE
    slide.placeholders[1].text = f"Business: {data.get('business', '')}"

    slide = prs.slides.add_slide(prs.slide_layouts[1])
    slide.shapes.title.text = "Summary"
    body = slide.shapes.placeholders[1].text_frame
    body.clear()
    body.paragraphs[0].text = f"Overall score: {report.get('overall_score', 0)}/100"
    body.add_paragraph().text = f"Assessment: {report.get('verbal_assessment', '')}"
    body.add_paragraph().text = f"Readiness level: {report.get('readiness_level', '')}"
    body.add_paragraph().text = f"Method: {len(QUESTIONS)} questions across {len(CATEGORIES)} categories."

    slide = prs.slides.add_slide(prs.slide_layouts[5])
    slide.shapes.title.text = "Category Scores"
    rows, cols = len(CATEGORIES) + 1, 2
    table = slide.shapes.add_table(
        rows, cols, Inches(0.8), Inches(1.5), Inches(8.0), Inches(0.8 + 0.35 * rows)
    ).table
    table.cell(0, 0).text, table.cell(0, 1).text = "Category", "Score (0-5)"
    for i, cat in enumerate(CATEGORIES, start=1):
        table.cell(i, 0).text = CATEGORY_LABELS[cat]
        table.cell(i, 1).text = f"{float(cat_scores.get(cat.value, 0.0)):.2f}"

    slide = prs.slides.add_slide(prs.slide_layouts[1])
    slide.shapes.title.text = "Recommendations"
    tf = slide.placeholders[1].text_frame
    tf.clear()
    for line in _rec_lines(report):
        tf.add_paragraph().text = line

    slide = prs.slides.add_slide(prs.slide_layouts[5])
    slide.shapes.title.text = "Analysis by Category"
    rows, cols = len(CATEGORIES) + 1, 2
    table = slide.shapes.add_table(
        rows, cols, Inches(0.5), Inches(1.4), Inches(9.0), Inches(0.6 + 0.6 * rows)
    ).table
    table.columns[0].width = Inches(2.0)
    table.columns[1].width = Inches(7.0)
    table.cell(0, 0).text, table.cell(0, 1).text = "Category", "Analysis"
    for i, cat in enumerate(CATEGORIES, start=1):
        table.cell(i, 0).text = CATEGORY_LABELS[cat]
        table.cell(i, 1).text = analysis.get(cat.value, "")
    prs.save(buf)


def _img_from_fig(fig, width=720, height=420, scale=2):
    # Requires kaleido installed
    png_bytes = pio.to_image(fig, format="png", width=width, height=height, scale=scale)
    return io.BytesIO(png_bytes)


def _table_style():
    return TableStyle(
        [
            ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#e9ebf3")),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.HexColor("#0b1020")),
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
            ("TOPPADDING", (0, 0), (-1, 0), 6),
        ]
    )


def write_pdf_bytes(buf, data, theme="light", include_charts=True):
    """
    Write a PDF summary to a bytes buffer.

    Chart images are rendered through kaleido; pass include_charts=False to
    produce a text-and-tables PDF without it.
    """
    report = data.get("report") or {}
    cat_scores = report.get("category_scores", {})
    analysis = report.get("category_analysis", {})

    doc = SimpleDocTemplate(
        buf, pagesize=A4, leftMargin=16, rightMargin=16, topMargin=16, bottomMargin=16
    )
    styles = getSampleStyleSheet()
    story = [
        Paragraph(f"<b>{TITLE}</b>", styles["Title"]),
        Spacer(1, 8),
        Paragraph(f"Business: {escape(data.get('business', ''))}", styles["Normal"]),
        Spacer(1, 10),
        Paragraph(
            f"<b>Overall score:</b> {report.get('overall_score', 0)}/100", styles["Heading3"]
        ),
        Paragraph(
            f"{report.get('verbal_assessment', '')} "
            f"(readiness level: {report.get('readiness_level', '')})",
            styles["Normal"],
        ),
        Spacer(1, 8),
    ]

    avail = A4[0] - 72
    col0 = 160
    tbl_data = [["Category", "Score (0-5)"]] + [
        [CATEGORY_LABELS[c], f"{float(cat_scores.get(c.value, 0.0)):.2f}"] for c in CATEGORIES
    ]
    tbl = Table(tbl_data, colWidths=[col0, avail - col0], hAlign="LEFT")
    style = _table_style()
    style.add("ALIGN", (1, 1), (-1, -1), "RIGHT")
    tbl.setStyle(style)
    story += [
        Paragraph("<b>Category Scores</b>", styles["Heading3"]),
        Spacer(1, 6),
        tbl,
        Spacer(1, 12),
    ]

    if include_charts:
        figs = [
            ("Readiness Radar", radar_figure(cat_scores, theme)),
            ("Category Bar", bar_figure(cat_scores, theme)),
            ("Question Scores", heatmap_figure(data.get("answers", {}), theme)),
        ]
        for title, fig in figs:
            story += [Paragraph(f"<b>{title}</b>", styles["Heading3"]), Spacer(1, 6)]
            img_buf = _img_from_fig(fig, width=520, height=320, scale=2)
            story += [RLImage(img_buf, width=520, height=320), Spacer(1, 12)]

    ana_data = [["Category", "Analysis"]] + [
        [
            CATEGORY_LABELS[c],
            Paragraph(analysis.get(c.value, "").replace("\n", "<br/>"), styles["Normal"]),
        ]
        for c in CATEGORIES
    ]
    ana_tbl = Table(ana_data, colWidths=[col0, avail - col0], hAlign="LEFT")
    ana_tbl.setStyle(_table_style())
    story += [
        Paragraph("<b>Analysis by Category</b>", styles["Heading3"]),
        Spacer(1, 6),
        ana_tbl,
        Spacer(1, 12),
    ]

    recs = _rec_lines(report)
    if recs:
        bullets = ListFlowable(
            [ListItem(Paragraph(r, styles["Normal"])) for r in recs],
            bulletType="bullet",
        )
        story += [
            Paragraph("<b>Recommendations</b>", styles["Heading3"]),
            Spacer(1, 6),
            bullets,
        ]

    doc.build(story)
