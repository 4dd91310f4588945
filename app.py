"""
Macro Policy Game - Interactive Dashboard

Set tax, spending and interest-rate policy each quarter and try to serve a
full 16-quarter term without losing the public.

Run with: streamlit run app.py
"""

import streamlit as st
import plotly.graph_objects as go

from macrogame.config import CALIBRATION
from macrogame.engine import Game, history_frame
from macrogame.state import EndReason, PolicyInput

# ── Page config ──────────────────────────────────────────────────────
st.set_page_config(
    page_title="Macro Policy Game",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Common layout for all charts
CHART_THEME = dict(
    template="simple_white",
    paper_bgcolor="rgba(0,0,0,0)",
    plot_bgcolor="rgba(0,0,0,0)",
    font=dict(color="#262730"),
)

NEWS_LENGTH = 5
GREETING = "Welcome to the ministry. Start by reviewing this quarter's budget."
RESET_MESSAGE = "The game has been reset. A fresh start for the new term."

END_MESSAGES = {
    EndReason.TERM_COMPLETE: "Your term is complete.",
    EndReason.DISSOLVED: "Support collapsed and the government was dissolved.",
}


# ── Helper: build line chart ─────────────────────────────────────────
def line_chart(x, y, title, yaxis, color="#1f77b4", fmt=None, fill=False):
    fig = go.Figure()
    hover = "%{y:.1f}" if fmt is None else fmt
    fig.add_trace(
        go.Scatter(
            x=x, y=y, mode="lines+markers", line=dict(color=color, width=2.5),
            fill="tozeroy" if fill else None,
            hovertemplate=hover + "<extra></extra>",
        )
    )
    fig.update_layout(
        **CHART_THEME,
        title=dict(text=title, font=dict(size=14)),
        yaxis_title=yaxis, height=320,
        margin=dict(l=50, r=20, t=35, b=30),
        hovermode="x unified",
    )
    return fig


# ── Session ──────────────────────────────────────────────────────────
if "game" not in st.session_state:
    st.session_state["game"] = Game()
    st.session_state["news"] = [GREETING]
game: Game = st.session_state["game"]
limits = CALIBRATION.limits

# ── Sidebar ──────────────────────────────────────────────────────────
st.sidebar.title("Policy Controls")

tax_pct = st.sidebar.slider(
    "Tax Rate (%)",
    limits.tax_rate[0] * 100, limits.tax_rate[1] * 100,
    game.current_state.tax_rate * 100, step=0.5,
)
spending_delta = st.sidebar.slider(
    "Government Spending Change",
    int(limits.spending_delta[0]), int(limits.spending_delta[1]), 0, step=500,
)
rate_delta = st.sidebar.slider(
    "Interest Rate Change (pt)",
    limits.interest_rate_delta[0], limits.interest_rate_delta[1], 0.0, step=0.01,
)

if st.sidebar.button("Next Quarter", disabled=game.is_over, type="primary"):
    game.advance_turn(
        PolicyInput(
            tax_rate=tax_pct / 100,
            interest_rate_delta=rate_delta,
            spending_delta=float(spending_delta),
        )
    )
    news = st.session_state["news"]
    st.session_state["news"] = [game.last_feedback.commentary] + news[: NEWS_LENGTH - 1]

if st.sidebar.button("Restart"):
    game.reset()
    st.session_state["news"] = [RESET_MESSAGE]

# ── Header ───────────────────────────────────────────────────────────
st.title("Macro Policy Game")
current = game.current_state
history = game.history
df = history_frame(history)
first = history[0]

c1, c2, c3, c4, c5 = st.columns(5)
c1.metric("Quarter", current.label, f"{current.period}/{CALIBRATION.rules.term_length}")
c2.metric("Real GDP", f"{current.output / 1000:,.1f} T",
          f"{(current.output / first.output - 1) * 100:+.1f}%")
c3.metric("Unemployment", f"{current.unemployment_rate * 100:.2f}%",
          f"{(current.unemployment_rate - first.unemployment_rate) * 100:+.2f}pp",
          delta_color="inverse")
c4.metric("Price Index", f"{current.price_level:.1f}",
          f"{(current.price_level / first.price_level - 1) * 100:+.1f}%",
          delta_color="inverse")
c5.metric("Public Support", f"{current.public_support:.0f}/100",
          f"{current.public_support - first.public_support:+.1f}")

feedback = game.last_feedback
if feedback is not None and not game.is_over:
    st.info(
        f"**{current.label}**: GDP {feedback.gdp_change:+.1f}%, "
        f"unemployment {feedback.unemployment_change:+.1f}%, "
        f"prices {feedback.price_change:+.1f}%. {feedback.commentary}"
    )

# ── Advisor feed ─────────────────────────────────────────────────────
with st.expander("Advisor News", expanded=True):
    for item in st.session_state["news"]:
        st.markdown(f"- {item}")

# ── Game over ────────────────────────────────────────────────────────
if game.is_over:
    outcome = game.classify_outcome()
    st.subheader(f"Rank {outcome.letter_rank}: {outcome.title}")
    st.markdown(f"{END_MESSAGES[outcome.reason]} {outcome.description}")
    m = outcome.metrics
    g1, g2, g3, g4 = st.columns(4)
    g1.metric("GDP Growth (term)", f"{m.growth * 100:+.1f}%")
    g2.metric("Inflation (term)", f"{m.inflation * 100:+.1f}%")
    g3.metric("Final Unemployment", f"{m.unemployment * 100:.2f}%")
    g4.metric("Final Support", f"{m.support:.0f}")

# ── Tabs ─────────────────────────────────────────────────────────────
tab_gdp, tab_unemp, tab_price, tab_support = st.tabs(
    ["GDP", "Unemployment", "Prices", "Support"]
)
labels = df["label"]

with tab_gdp:
    st.plotly_chart(
        line_chart(labels, df["output"] / 1000, "Real GDP", "Trillions",
                   color="#3b82f6", fill=True),
        use_container_width=True,
    )
with tab_unemp:
    st.plotly_chart(
        line_chart(labels, df["unemployment_rate"] * 100, "Unemployment Rate (%)", "%",
                   color="#10b981", fmt="%{y:.2f}%"),
        use_container_width=True,
    )
with tab_price:
    st.plotly_chart(
        line_chart(labels, df["price_level"], "Price Index", "Index", color="#a855f7"),
        use_container_width=True,
    )
with tab_support:
    st.plotly_chart(
        line_chart(labels, df["public_support"], "Public Support (0-100)", "Score",
                   color="#ec4899"),
        use_container_width=True,
    )

with st.expander("Quarterly Data", expanded=False):
    st.dataframe(df, use_container_width=True)

# ── Footer ───────────────────────────────────────────────────────────
st.divider()
st.caption(
    "A simplified error-correction model of a closed economy for "
    "educational play. It makes no claim to forecast real outcomes."
)
