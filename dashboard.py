"""
Coin Lookup Dashboard - Streamlit Application.
Search a cryptocurrency, chart its one-year USD price, and show the top KRW
trading pairs by traded value.
"""

import asyncio
from typing import Optional

import streamlit as st

from config import ConfigurationError, get_config
from services.coin_dashboard import CoinDashboardController
from utils.logging_config import configure_logging, get_logger

logger = get_logger(__name__)

# Page configuration
st.set_page_config(
    page_title="Coin Lookup",
    page_icon="🪙",
    layout="wide",
)

STATUS_RENDERERS = {
    "success": st.success,
    "error": st.error,
    "loading": st.info,
    "info": st.caption,
}


def get_controller() -> Optional[CoinDashboardController]:
    """Create the session controller once per browser session."""
    if "controller" in st.session_state:
        return st.session_state.controller

    try:
        config = get_config()
    except ConfigurationError as e:
        st.error(f"⚠️ Configuration Error: {e}")
        st.info("Please check your .env file.")
        return None

    configure_logging(log_level=config.log_level, json_format=config.log_json)
    controller = CoinDashboardController(config=config)
    st.session_state.controller = controller
    logger.info("dashboard_session_started", strategy=config.top_tickers_strategy)
    return controller


def run_async(controller: CoinDashboardController, coro):
    """Run one controller coroutine on a fresh event loop, then release the HTTP client."""
    async def runner():
        try:
            return await coro
        finally:
            await controller.close()

    return asyncio.run(runner())


def render_search(controller: CoinDashboardController) -> None:
    with st.form("search_form"):
        col1, col2 = st.columns([5, 1])
        with col1:
            query = st.text_input(
                "코인 검색",
                placeholder="예: 비트코인, ethereum, SOL",
                label_visibility="collapsed",
            )
        with col2:
            submitted = st.form_submit_button(
                "검색",
                use_container_width=True,
                disabled=controller.state.is_loading,
            )

    if submitted:
        with st.spinner("불러오는 중..."):
            run_async(controller, controller.search(query))


def render_recent(controller: CoinDashboardController) -> None:
    entries = controller.history.entries()
    if not entries:
        return

    st.markdown("**최근 검색**")
    columns = st.columns(len(entries))
    for column, coin in zip(columns, entries):
        with column:
            if st.button(coin.symbol.upper(), key=f"recent_{coin.id}", help=coin.name):
                with st.spinner("불러오는 중..."):
                    run_async(controller, controller.open_recent(coin))
                st.rerun()


def render_status(controller: CoinDashboardController) -> None:
    status = controller.state.status
    if status.text:
        STATUS_RENDERERS.get(status.level, st.caption)(status.text)


def render_price(controller: CoinDashboardController) -> None:
    current = controller.state.current
    if current is None:
        st.info("코인 이름이나 심볼을 입력하면 1년 시세 차트를 보여 드립니다.")
        return

    st.subheader(current.title)
    st.caption(current.meta)
    figure = controller.price_chart.current
    if figure is not None:
        st.pyplot(figure, clear_figure=False)


def render_top_tickers(controller: CoinDashboardController) -> None:
    st.subheader("원화 마켓 거래대금 상위")

    if st.button("🔄 Refresh", key="refresh_tickers") or "tickers_loaded" not in st.session_state:
        with st.spinner("불러오는 중..."):
            run_async(controller, controller.load_top_tickers())
        st.session_state.tickers_loaded = True

    if controller.state.top_tickers_notice:
        st.warning(controller.state.top_tickers_notice)
        return

    figure = controller.tickers_chart.current
    if figure is None:
        st.caption("표시할 원화 마켓 데이터가 없습니다.")
        return
    st.pyplot(figure, clear_figure=False)


def main():
    """Main dashboard application."""
    st.title("🪙 Coin Lookup")
    st.markdown("CoinGecko 1년 시세와 업비트 원화 마켓 상위 종목")
    st.markdown("---")

    controller = get_controller()
    if not controller:
        st.stop()

    render_search(controller)
    render_recent(controller)
    render_status(controller)
    render_price(controller)

    st.markdown("---")
    render_top_tickers(controller)

    st.markdown("---")
    st.caption("Data: CoinGecko · Upbit")


if __name__ == "__main__":
    main()
