from pathlib import Path

from docindex import load, parse_docstring
from docindex.docstrings import Parameter, parse_parameter

DATA_DIR = Path(__file__).resolve().parent / "data"


def test_parse_parameter_with_default():
    param = parse_parameter("βₘₐₓ::Real=0.999f0: maximum value of β")
    assert param == Parameter(name="βₘₐₓ", type="Real", default="0.999f0", description="maximum value of β")


def test_parse_parameter_without_type_keeps_description():
    param = parse_parameter("github:openai/improved-diffusion")
    assert param.name == ""
    assert param.description == "github:openai/improved-diffusion"


def test_parse_indexed_method_docstring():
    symbols = load(DATA_DIR / "search_index.js").symbols()
    sections = parse_docstring(symbols["Diffusers.Schedulers.reverse"].text)
    assert sections.summary == "Remove noise from model output using the backward diffusion process."
    assert [p.name for p in sections.inputs] == ["scheduler", "xₜ", "ϵᵧ", "t"]
    assert [p.type for p in sections.inputs] == ["Scheduler", "AbstractArray", "AbstractArray", "AbstractArray"]
    assert [p.name for p in sections.outputs] == ["xₜ₋₁", "x̂₀"]
    assert sections.outputs[1].description == "denoised sample at t=0"
    assert sections.references == []


def test_parse_function_docstring_with_references():
    symbols = load(DATA_DIR / "search_index.js").symbols()
    sections = parse_docstring(symbols["Diffusers.BetaSchedules.cosine_beta_schedule"].text)
    assert sections.summary == "Cosine beta schedule."
    assert [(p.name, p.default) for p in sections.inputs] == [("T", None), ("βₘₐₓ", "0.999f0"), ("ϵ", "1.0f-3")]
    assert sections.outputs[0].type == "Vector{Real}"
    assert sections.references == [
        "[2102.09672] Improved Denoising Diffusion Probabilistic Models",
        "github:openai/improved-diffusion",
    ]


def test_parse_plain_text():
    sections = parse_docstring("Abstract type for schedulers.\n\n\n\n\n\n")
    assert sections.summary == "Abstract type for schedulers."
    assert sections.inputs == []
    assert parse_docstring("").summary == ""
