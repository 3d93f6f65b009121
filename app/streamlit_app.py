from __future__ import annotations

import secrets
from typing import Dict, List, Optional

import streamlit as st

from xr30lab.config import load_settings
from xr30lab.cipher.automaton import trace
from xr30lab.cipher.builder import build_cipher
from xr30lab.cipher.errors import XR30Error
from xr30lab.cipher.metrics import evaluate_and_score, heuristic_issues
from xr30lab.cipher.register import Register
from xr30lab.cipher.registry import RuleRegistry
from xr30lab.cipher.spec import CipherSpec
from xr30lab.evaluation.avalanche import compute_sac
from xr30lab.evaluation.report import EvaluationReport
from xr30lab.evaluation.roundtrip import run_roundtrip_tests
from xr30lab.evaluation.weak_keys import analyze_subkeys, probe_known_weak_keys
from xr30lab.utils.repro import make_run_dir, write_json


st.set_page_config(page_title="XR30256 Lab", layout="wide")

settings = load_settings()

st.title("XR30256 Lab - Rule-30 Cellular-Automaton Block Cipher")
st.caption("Research-only lab: encrypt single 256-bit blocks, inspect the subkeys and CA evolution, and run local metrics.")

registry = RuleRegistry()

# ---------- Sidebar: parameters ----------
st.sidebar.header("Parameters")
rule_names = [r.name for r in registry.list()]
rule_name = st.sidebar.selectbox("Round CA rule", rule_names, index=rule_names.index("rule30"))
rounds = st.sidebar.slider("Rounds", min_value=1, max_value=32, value=16, step=1)
seed = st.sidebar.number_input("Seed (reproducibility)", min_value=0, max_value=2**31-1, value=int(settings.global_seed), step=1)

spec = CipherSpec(rule=registry.get(rule_name).number, rounds=int(rounds), seed=int(seed))
if spec.is_reference:
    st.sidebar.success("Reference XR30256 parameters.")
else:
    spec = spec.model_copy(update={"name": f"XR30256-{rule_name}-{rounds}rd"})
    st.sidebar.warning("Experimental variant: this is NOT XR30256.")

cipher = build_cipher(spec, registry)


def _parse(label: str, text: str) -> Optional[Register]:
    try:
        return Register.from_hex(text, what=label)
    except (XR30Error, ValueError) as e:
        st.error(f"{label}: {e}")
        return None


# ---------- Main: single block ----------
st.subheader("1) Encrypt / decrypt one block")

if "key_hex" not in st.session_state:
    st.session_state["key_hex"] = "a59535d07e192f1282734fb3084c5e05385b8a038d28e669d2bc44a82c395d8e"
if st.button("New random key"):
    st.session_state["key_hex"] = secrets.token_bytes(32).hex()

key_hex = st.text_input("Key (64 hex digits)", key="key_hex")
block_hex = st.text_input(
    "Block (64 hex digits)",
    value="0101010101010101020202020202020203030303030303030404040404040404",
)
show_binary = st.checkbox("Show binary", value=False)

key = _parse("key", key_hex)
block = _parse("block", block_hex)
ok = key is not None and block is not None

colA, colB = st.columns(2)
with colA:
    if st.button("Encrypt", disabled=not ok):
        st.session_state["result"] = ("ciphertext", cipher.context(key).encrypt(block))
with colB:
    if st.button("Decrypt", disabled=not ok):
        st.session_state["result"] = ("plaintext", cipher.context(key).decrypt(block))

result = st.session_state.get("result")
if result:
    label, out = result
    st.write(f"**{label}:**")
    st.code(out.to_binary(" ") if show_binary else out.to_hex(" "))

if ok:
    with st.expander("Scheduled subkeys", expanded=False):
        ctx = cipher.context(key)
        for i, subkey in enumerate(ctx.scheduled_key, start=1):
            st.text(f"K{i}: {subkey.to_binary() if show_binary else subkey.to_hex(' ')}")
        diversity = analyze_subkeys(key.words, label="current key", rule_table=cipher.rule_table,
                                    generations=spec.key_generations)
        if diversity.is_degenerate:
            st.warning(diversity.summary())
        else:
            st.success(diversity.summary())

# ---------- CA evolution ----------
with st.expander("CA evolution of the block", expanded=False):
    gens = st.slider("Generations", min_value=1, max_value=255, value=64, step=1)
    if block is not None:
        rows = trace(block, cipher.rule_table, int(gens))
        st.code("\n".join(r.to_binary().replace("0", " ").replace("1", "#") for r in rows))

# ---------- Local metrics ----------
st.subheader("2) Evaluate locally")
st.caption("Pure-Python CA rounds are slow; keep trial counts small.")

metrics: Optional[Dict[str, object]] = None
issues: List[str] = []

trials = st.number_input("Avalanche trials", min_value=1, max_value=256, value=int(settings.avalanche_trials), step=1)
if st.button("Run avalanche metrics"):
    with st.spinner("Running metrics (avalanche tests)…"):
        metrics = evaluate_and_score(spec, trials=int(trials), registry=registry)
        issues = heuristic_issues(metrics)
    st.session_state["metrics"] = metrics
    st.session_state["issues"] = issues

metrics = st.session_state.get("metrics")
issues = st.session_state.get("issues", [])

if metrics:
    col1, col2 = st.columns(2)
    with col1:
        st.json(metrics)
    with col2:
        st.write("Detected issues:")
        if issues:
            st.warning("\n".join(["- " + x for x in issues]))
        else:
            st.success("No obvious issues flagged by heuristics (still not a security claim).")

with st.expander("Advanced evaluation (roundtrip + SAC + weak keys)", expanded=False):
    adv_col1, adv_col2 = st.columns(2)
    with adv_col1:
        adv_num_vectors = st.number_input("Roundtrip test vectors", min_value=1, max_value=1000,
                                          value=int(settings.roundtrip_vectors), step=1)
    with adv_col2:
        adv_sac_trials = st.number_input("SAC trials per bit (0 skips)", min_value=0, max_value=16,
                                         value=int(settings.sac_trials), step=1)

    if st.button("Run full evaluation", key="btn_full_eval"):
        eval_report = EvaluationReport()

        with st.spinner(f"Running roundtrip tests ({adv_num_vectors} vectors)…"):
            eval_report.roundtrip_results = [
                run_roundtrip_tests(spec, num_vectors=int(adv_num_vectors), seed=int(seed), registry=registry)
            ]

        if adv_sac_trials > 0:
            for input_type in ("plaintext", "key"):
                with st.spinner(f"Computing SAC ({input_type}, {adv_sac_trials} trials/bit)…"):
                    eval_report.sac_results.append(compute_sac(
                        cipher,
                        input_type=input_type,
                        trials=int(adv_sac_trials),
                        seed=int(seed),
                        algorithm_name=spec.name,
                    ))

        with st.spinner("Probing known weak keys…"):
            eval_report.weak_key_results = probe_known_weak_keys(spec, registry=registry)

        eval_report.avalanche = st.session_state.get("metrics")
        st.session_state["eval_report"] = eval_report

    eval_report = st.session_state.get("eval_report")
    if eval_report:
        for rt in eval_report.roundtrip_results:
            if rt.is_perfect:
                st.success(rt.summary())
            else:
                st.error(rt.summary())

        for sac in eval_report.sac_results:
            if sac.passes_sac:
                st.success(sac.summary())
            else:
                st.warning(sac.summary())

        for w in eval_report.weak_key_results:
            if w.is_degenerate:
                st.warning(w.summary())
            else:
                st.text(w.summary())

        if st.button("Save as reproducible run"):
            run = make_run_dir(settings.runs_dir, spec.name)
            write_json(run.spec_json, spec.model_dump())
            write_json(run.report_json, eval_report.to_dict())
            st.success(f"Saved run to: {run.run_dir}")
