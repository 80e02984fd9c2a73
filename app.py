# app.py

import logging

import dash
import dash_daq as daq
from dash import ALL, Input, Output, State, ctx, dcc, html

from config import (AUTO_ADVANCE_MS, CATEGORIES, CATEGORY_LABELS, LOG_LEVEL,
                    QUESTIONS)
from contact import submit_consultation
from exports import (BAR_H, HEAT_H, RADAR_H, TITLE, bar_figure, empty_figure,
                     heatmap_figure, radar_figure, responses_frame,
                     write_pdf_bytes, write_ppt_bytes)
from models import IncompleteAnswersError
from scoring import round_half_up
from wizard import (TOTAL_QUESTIONS, AssessmentState, answered_count,
                    apply_event, current_question, progress_percentage)

logger = logging.getLogger(__name__)

app = dash.Dash(__name__, suppress_callback_exceptions=True)
app.title = TITLE
server = app.server

GRAPH_CONFIG = {"responsive": False, "displaylogo": False, "scrollZoom": False}


def _slug(s: str):
    return "".join(ch.lower() if ch.isalnum() else "-" for ch in s).strip("-")


# -------------- Layout --------------------
def build_question_panel(state):
    """
    The current question with one button per option; the selected option is
    highlighted.

    :param state: AssessmentState
    :return: an html.Div
    """
    q = current_question(state)
    chosen = state.answers.get(q["key"])
    buttons = [
        html.Button(
            o["label"],
            id={"type": "answer-option", "key": q["key"], "token": o["value"]},
            n_clicks=0,
            className="option selected" if chosen == o["value"] else "option",
        )
        for o in q["options"]
    ]
    return html.Div(
        [
            html.Div(CATEGORY_LABELS[q["category"]], className="qcategory"),
            html.H2(q["prompt"], className="qtext"),
            html.Div(buttons, className="options"),
        ],
        className=f"question-card d-{_slug(q['category'].value)}",
    )


def _field(label, component):
    return html.Div([html.Label(label), component], className="field")


app.layout = html.Div(
    id="page-root",
    className="page theme-light",
    children=[
        dcc.Store(id="state-store", data=AssessmentState().to_dict()),
        dcc.Store(id="theme-store", data="light"),
        dcc.Interval(
            id="advance-timer", interval=AUTO_ADVANCE_MS, max_intervals=1, disabled=True
        ),
        # Header
        html.Div(
            [
                html.H1("Is your business ready for sale?"),
                html.Div(
                    [
                        _field(
                            "Business",
                            dcc.Input(
                                id="business-name",
                                placeholder="e.g., Corner Bakery Ltd.",
                                className="textin",
                            ),
                        ),
                        _field(
                            "Dark mode",
                            daq.BooleanSwitch(
                                id="theme-switch",
                                on=False,
                                color="#4f46e5",
                                className="theme-switch",
                            ),
                        ),
                    ],
                    className="meta",
                ),
            ],
            className="header",
        ),
        dcc.Tabs(
            id="tabs",
            value="tab-assess",
            children=[
                dcc.Tab(
                    label="Questionnaire",
                    value="tab-assess",
                    children=[
                        html.Div(id="question-panel"),
                        html.Div(
                            [
                                html.Button("Previous", id="prev-btn", n_clicks=0, className="secondary"),
                                html.Button("Next", id="next-btn", n_clicks=0, className="secondary"),
                                html.Button(
                                    "Show Results Now",
                                    id="finish-btn",
                                    n_clicks=0,
                                    className="primary",
                                ),
                            ],
                            className="nav-row",
                        ),
                        html.Div(
                            [
                                html.Span(id="progress-text", className="progress-text"),
                                html.Div(
                                    html.Div(id="progress-fill", className="progress-fill"),
                                    className="progress-track",
                                ),
                                html.Span(id="progress-count", className="progress-text"),
                            ],
                            className="progress-row",
                        ),
                        html.Div(id="wizard-alert", className="alert"),
                    ],
                ),
                dcc.Tab(
                    label="Results & Recommendations",
                    value="tab-results",
                    children=[
                        html.Div(id="kpis", className="kpis"),
                        html.Div(
                            [
                                html.Button("Download CSV", id="dl-csv", n_clicks=0, className="secondary"),
                                dcc.Download(id="dl-csv-out"),
                                html.Button("Download PPTX", id="dl-ppt", n_clicks=0, className="secondary"),
                                dcc.Download(id="dl-ppt-out"),
                                html.Button("Download PDF", id="dl-pdf", n_clicks=0, className="secondary"),
                                dcc.Download(id="dl-pdf-out"),
                            ],
                            className="export-row",
                        ),
                        html.Div(
                            [
                                dcc.Graph(id="radar", style={"height": f"{RADAR_H}px"}, config=GRAPH_CONFIG),
                                dcc.Graph(id="bar", style={"height": f"{BAR_H}px"}, config=GRAPH_CONFIG),
                            ],
                            className="charts",
                        ),
                        html.H3("Analysis by Category"),
                        html.Div(id="analysis-cards", className="grid"),
                        html.Div(
                            className="row-heat-actions",
                            children=[
                                html.Div(
                                    [
                                        html.H3("Question Scores"),
                                        dcc.Graph(id="heatmap", style={"height": f"{HEAT_H}px"}, config=GRAPH_CONFIG),
                                    ],
                                    className="col heatmap-col",
                                ),
                                html.Div(
                                    [
                                        html.H3("Recommendations"),
                                        html.Ul(id="actions-list", className="actions"),
                                    ],
                                    className="col recs-col",
                                ),
                            ],
                        ),
                        # Consultation request
                        html.Div(
                            [
                                html.H3("Want to book a consultation with an expert?"),
                                html.Div(
                                    [
                                        _field("Full name *", dcc.Input(id="contact-name", className="textin")),
                                        _field("Mobile *", dcc.Input(id="contact-mobile", type="tel", className="textin")),
                                        _field("Email *", dcc.Input(id="contact-email", type="email", className="textin")),
                                        html.Button("Send", id="contact-submit", n_clicks=0, className="primary"),
                                    ],
                                    className="meta",
                                ),
                                html.Div(id="contact-message"),
                            ],
                            className="contact-card",
                        ),
                        html.Button("Start a New Assessment", id="restart-btn", n_clicks=0, className="secondary"),
                    ],
                ),
            ],
        ),
    ],
)


# -------- Callbacks ------------------
@app.callback(
    Output("state-store", "data"),
    Output("advance-timer", "disabled"),
    Output("advance-timer", "n_intervals"),
    Output("wizard-alert", "children"),
    Input({"type": "answer-option", "key": ALL, "token": ALL}, "n_clicks"),
    Input("advance-timer", "n_intervals"),
    Input("prev-btn", "n_clicks"),
    Input("next-btn", "n_clicks"),
    Input("finish-btn", "n_clicks"),
    Input("restart-btn", "n_clicks"),
    State("state-store", "data"),
    prevent_initial_call=True,
)
def on_wizard_event(_options, _ticks, _prev, _next, _finish, _restart, data):
    """
    Apply one stepper transition to the stored state.

    Selecting an option records it and arms the auto-advance timer; the
    timer tick then moves to the next question (or finishes on the last one).

    Returns:
        tuple: (state dict, timer disabled, timer n_intervals, alert text)
    """
    trigger = ctx.triggered_id
    if trigger is None or not ctx.triggered[0]["value"]:
        raise dash.exceptions.PreventUpdate
    return handle_wizard_event(AssessmentState.from_dict(data), event_for(trigger))


def event_for(trigger_id):
    """Translate a Dash component id into a stepper event."""
    if isinstance(trigger_id, dict) and trigger_id.get("type") == "answer-option":
        return ("answer", trigger_id["key"], trigger_id["token"])
    return WIZARD_EVENTS[trigger_id]


WIZARD_EVENTS = {
    "prev-btn": "prev",
    "next-btn": "next",
    "advance-timer": "tick",
    "finish-btn": "finish",
    "restart-btn": "restart",
}


def handle_wizard_event(state, event, allow_partial=None):
    """
    :return: (state dict, timer disabled, timer n_intervals, alert text)
    """
    try:
        new_state, arm_timer = apply_event(state, event, allow_partial=allow_partial)
    except IncompleteAnswersError as exc:
        logger.info("Report refused: %s", exc)
        return dash.no_update, True, 0, f"Please answer all questions first ({exc})."
    if new_state is None:
        raise dash.exceptions.PreventUpdate
    return new_state.to_dict(), not arm_timer, 0, ""


@app.callback(
    Output("question-panel", "children"),
    Output("progress-text", "children"),
    Output("progress-fill", "style"),
    Output("progress-count", "children"),
    Input("state-store", "data"),
)
def render_question(data):
    state = AssessmentState.from_dict(data)
    pct = progress_percentage(state)
    return (
        build_question_panel(state),
        f"Completed so far {pct}% ({answered_count(state)} answered)",
        {"width": f"{pct}%"},
        f"{state.index + 1} / {TOTAL_QUESTIONS}",
    )


# UX: switch to results once a report exists, back to the questionnaire on restart
@app.callback(
    Output("tabs", "value"),
    Input("state-store", "data"),
    prevent_initial_call=True,
)
def switch_tab(data):
    return "tab-results" if AssessmentState.from_dict(data).finished else "tab-assess"


@app.callback(
    Output("kpis", "children"),
    Output("radar", "figure"),
    Output("bar", "figure"),
    Output("heatmap", "figure"),
    Output("analysis-cards", "children"),
    Output("actions-list", "children"),
    Input("state-store", "data"),
    Input("theme-store", "data"),
)
def update_results(data, theme):
    """
    Updates the KPIs, charts, per-category analysis and recommendations from
    the stored report. Without a report everything is cleared.
    """
    state = AssessmentState.from_dict(data)
    report = state.report
    if report is None:
        return (
            [],
            empty_figure(theme, RADAR_H),
            empty_figure(theme, BAR_H),
            heatmap_figure({}, theme),
            [],
            [],
        )

    scores = {c.value: v for c, v in report.category_scores.items()}
    kpi_children = [
        html.Div(
            [
                html.Div("Overall Score", className="kpi-title"),
                html.Div(f"{report.overall_score}/100", className="kpi-value"),
                html.Div(report.verbal_assessment, className="kpi-sub"),
                html.Div(f"Readiness level: {report.readiness_level}", className="kpi-sub"),
            ],
            className="kpi kpi-main",
        ),
    ]
    for cat in CATEGORIES:
        kpi_children.append(
            html.Div(
                [
                    html.Div(CATEGORY_LABELS[cat], className="kpi-title"),
                    html.Div(f"{round_half_up(report.category_scores[cat])}", className="kpi-value"),
                ],
                className="kpi",
            )
        )

    cards = [
        html.Div(
            [html.H4(CATEGORY_LABELS[cat])]
            + [html.P(line) for line in report.category_analysis[cat].split("\n")],
            className=f"domain-card d-{_slug(cat.value)}",
        )
        for cat in CATEGORIES
    ]

    return (
        kpi_children,
        radar_figure(scores, theme),
        bar_figure(scores, theme),
        heatmap_figure(state.answers, theme),
        cards,
        [html.Li(r) for r in report.recommendations],
    )


@app.callback(
    Output("contact-message", "children"),
    Output("contact-message", "className"),
    Output("contact-name", "value"),
    Output("contact-mobile", "value"),
    Output("contact-email", "value"),
    Input("contact-submit", "n_clicks"),
    State("contact-name", "value"),
    State("contact-mobile", "value"),
    State("contact-email", "value"),
    State("state-store", "data"),
    prevent_initial_call=True,
)
def on_contact(n, name, mobile, email, data):
    """Send the consultation request; the form is cleared once it is accepted."""
    if not n:
        raise dash.exceptions.PreventUpdate
    report = AssessmentState.from_dict(data).report
    result = submit_consultation(name, mobile, email, report)
    if "message" in result:
        return result["message"], "alert success", "", "", ""
    return result["error"], "alert error", dash.no_update, dash.no_update, dash.no_update


def _export_data(data, business):
    state = AssessmentState.from_dict(data)
    if state.report is None:
        raise dash.exceptions.PreventUpdate
    return {
        "business": business or "",
        "answers": dict(state.answers),
        "report": state.report.to_dict(),
    }


# Exports
@app.callback(
    Output("dl-csv-out", "data"),
    Input("dl-csv", "n_clicks"),
    State("state-store", "data"),
    prevent_initial_call=True,
)
def download_csv(_, data):
    export = _export_data(data, "")
    df = responses_frame(export["answers"])
    return dcc.send_data_frame(df.to_csv, "sale_readiness_answers.csv", index=False)


@app.callback(
    Output("dl-ppt-out", "data"),
    Input("dl-ppt", "n_clicks"),
    State("state-store", "data"),
    State("business-name", "value"),
    prevent_initial_call=True,
)
def download_ppt(_, data, business):
    export = _export_data(data, business)
    return dcc.send_bytes(
        lambda b: write_ppt_bytes(b, export), "Sale_Readiness_Assessment.pptx"
    )


@app.callback(
    Output("dl-pdf-out", "data"),
    Input("dl-pdf", "n_clicks"),
    State("state-store", "data"),
    State("business-name", "value"),
    State("theme-store", "data"),
    prevent_initial_call=True,
)
def download_pdf(_, data, business, theme):
    """
    Download the report as a PDF file.

    Args:
        _ (int): Click count of the "Download PDF" button.
        data (dict): The stored assessment state.
        business (str): Business name from the header.
        theme (str, optional): light or dark chart theme. Defaults to "light".

    Returns:
        dict: dcc.send_bytes payload with the PDF data.
    """
    export = _export_data(data, business)
    return dcc.send_bytes(
        lambda b: write_pdf_bytes(b, export, theme or "light"),
        "Sale_Readiness_Assessment.pdf",
    )


# Theme toggle -> update page class and store
@app.callback(
    Output("page-root", "className"),
    Output("theme-store", "data"),
    Input("theme-switch", "on"),
)
def apply_theme(is_on):
    """
    Toggle the page theme class and store the current theme value.

    Args:
        is_on (bool): The on/off state of the theme switch.

    Returns:
        tuple: A pair of (page class name, theme name).
    """
    theme = "dark" if is_on else "light"
    return f"page theme-{theme}", theme


# ---------- Main -------------------
if __name__ == "__main__":
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Serving %d-question readiness assessment", len(QUESTIONS))
    app.run(debug=False)
