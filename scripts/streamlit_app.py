from __future__ import annotations
import sys
from pathlib import Path as _Path

_ROOT = _Path(__file__).resolve().parents[1]
_SRC = _ROOT / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))

from pathlib import Path
import pandas as pd
import streamlit as st
import traceback
import yaml

from query_hub.config.settings import load_settings
from query_hub.db.factory import normalize_engine, supported_engines
from query_hub.exceptions.errors import ConfigurationError, QueryHubError
from query_hub.export.saved_queries import list_query_files, load_query_file
from query_hub.logging.logger import init_logging
from query_hub.service.query_service import (
    cleanup_paths,
    execute_file,
    execute_queries,
    resolve_download,
    save_query_file,
    store_upload,
)
from query_hub.sql.splitter import split_statements

st.set_page_config(page_title="SQL Query Hub", layout="wide")

@st.cache_resource
def bootstrap():
    settings = load_settings()
    init_logging(settings.log_level, settings.log_file, settings.log_max_bytes, settings.log_backup_count)
    return settings

try:
    settings = bootstrap()
except Exception:
    st.error("Startup failed. See error below.")
    st.code(traceback.format_exc())
    raise

if "last_run" not in st.session_state:
    st.session_state["last_run"] = None

def _default_configs_yaml() -> str:
    return yaml.safe_dump(settings.db_configs or [{"name": "local", "host": "localhost"}], sort_keys=False)

with st.sidebar:
    st.header("Databases")
    engines = supported_engines()
    try:
        default_engine = normalize_engine(settings.db_engine)
    except ConfigurationError:
        default_engine = engines[0]
    engine = st.selectbox("Engine", engines, index=engines.index(default_engine))
    configs_text = st.text_area("Connection configs (YAML list)", value=_default_configs_yaml(), height=260)
    should_export = st.checkbox("Export results to Excel (zip)", value=False)

def _db_config():
    configs = yaml.safe_load(configs_text) or []
    return {"type": engine, "configs": configs}

def _run(fn, *args):
    try:
        st.session_state["last_run"] = fn(settings, *args, should_export, _db_config())
    except QueryHubError as e:
        st.error(str(e))
    except Exception as e:
        st.error(f"Run failed: {e}")
        st.code(traceback.format_exc())

st.title("SQL Query Hub")

tabs = st.tabs(["Queries", "SQL file", "Saved files"])

with tabs[0]:
    sql_text = st.text_area("SQL statements", height=220, placeholder="SELECT 1;\nSELECT 2;")
    c1, c2 = st.columns([1, 1])
    if c1.button("Run", key="run_text"):
        _run(execute_queries, split_statements(sql_text))
    if c2.button("Save as file", key="save_text"):
        try:
            st.success(f"Saved: {save_query_file(settings, sql_text)}")
        except QueryHubError as e:
            st.error(str(e))

with tabs[1]:
    upl = st.file_uploader("Upload a .sql file", type=["sql", "txt"])
    if upl is not None and st.button("Run file", key="run_file"):
        _run(execute_file, store_upload(settings, upl.name, upl.getbuffer().tobytes()))

with tabs[2]:
    saved = list_query_files(settings.saved_query_dir)
    if not saved:
        st.caption("No saved SQL files yet.")
    else:
        options = {f"{s.id} | {Path(s.path).name}": s.id for s in saved}
        sel = st.selectbox("Select a saved file", list(options.keys()))
        st.code(load_query_file(settings.saved_query_dir, options[sel]), language="sql")

res = st.session_state.get("last_run")
if res:
    st.divider()
    st.subheader("Row counts")
    st.dataframe(pd.DataFrame(res["counts"]).T, use_container_width=True)
    with st.expander("Query mapping", expanded=False):
        st.json(res["query_mapping"])

    for db_name, db_res in res["results"].items():
        with st.expander(f"Results: {db_name}", expanded=False):
            if isinstance(db_res, dict):
                st.error(f"Database unreachable: {db_res['error']}")
                continue
            for r in db_res:
                st.markdown(f"**{r['query_number']}** `{r['query'][:120]}`")
                if "error" in r:
                    st.error(r["error"])
                else:
                    st.caption(f"{r['count']} row(s)")
                    if r["rows"]:
                        st.dataframe(pd.DataFrame.from_records(r["rows"]), use_container_width=True)

    if res.get("zip_path"):
        try:
            zip_path = resolve_download(settings, res["zip_path"])
            data = Path(zip_path).read_bytes()
            if st.download_button("Download results (zip)", data=data, file_name=Path(zip_path).name):
                cleanup_paths(zip_path)
                st.session_state["last_run"] = None
        except FileNotFoundError:
            st.warning("ZIP file not found")
