"""Infrastructure utilities for Streamlit UI operations.

Wraps Streamlit-specific infrastructure (st.rerun, st.session_state) so tests
can patch it instead of every call site.

Only infrastructure belongs here; session objects (sm, ctx, client) are
passed to the actions explicitly.
"""

import logging

import streamlit as st

logger = logging.getLogger(__name__)


def trigger_rerun() -> None:
    """Trigger a full Streamlit rerun.

    In tests, patch 'saferoutes_planner.ui.infra.trigger_rerun' to prevent
    actual reruns (which raise RerunException).
    """
    st.rerun()


def bump_map_version() -> None:
    """Increment map_version to create a fresh st_deckgl component.

    A new component instance has no memory of previous click events, so the
    last click is not replayed after an action that consumed it.
    """
    old_version = st.session_state.get("map_version", 0)
    new_version = old_version + 1
    st.session_state.map_version = new_version
    logger.info(f"[MAP] Bumped map_version: {old_version} -> {new_version}")
