"""Property-based checks for pin file parsing and rendering."""

import tempfile
from pathlib import Path

import pytest

hypothesis = pytest.importorskip("hypothesis")

from hypothesis import given, settings, strategies as st  # noqa: E402

from pinsync.pinfile import parse_lines, read_pin_file, render_lines  # noqa: E402

NAMES = st.from_regex(r"[A-Za-z0-9_-]{1,12}", fullmatch=True)
VERSIONS = st.from_regex(r"[0-9]{1,3}(\.[0-9a-z]{1,4}){0,3}", fullmatch=True)
INDENT = st.sampled_from(["", " ", "  ", "\t"])
SPACING = st.sampled_from(["", " ", "  "])
TEXT = st.text(
    alphabet=st.characters(exclude_characters="\r\n", exclude_categories=("Cs",)),
    max_size=20,
)


@st.composite
def comment_lines(draw):
    return draw(INDENT) + "#" + draw(TEXT), None, ""


@st.composite
def blank_lines(draw):
    return draw(INDENT), None, ""


@st.composite
def declaration_lines(draw):
    name = draw(NAMES)
    version = draw(st.one_of(st.just(""), VERSIONS))
    body = draw(INDENT) + name
    if version:
        body += f"{draw(SPACING)}=={draw(SPACING)}{version}"
    if draw(st.booleans()):
        body += "  # note"
    return body, name, version


@st.composite
def pin_files(draw):
    """Lines as ``(raw, name, version, terminator)``; only the last may be unterminated."""

    bodies = draw(
        st.lists(st.one_of(declaration_lines(), comment_lines(), blank_lines()), max_size=15)
    )
    lines = []
    for idx, (body, name, version) in enumerate(bodies):
        choices = ["\n", "\r\n"]
        if idx == len(bodies) - 1:
            choices.append("")
        term = draw(st.sampled_from(choices))
        lines.append((body + term, name, version, term))
    return lines


@given(pin_files())
def test_empty_map_renders_identically(lines):
    raws = [raw for raw, _, _, _ in lines]
    records, _ = parse_lines(raws)

    assert render_lines(records, {}) == raws


@settings(deadline=None)
@given(pin_files())
def test_file_round_trip_is_byte_identical(lines):
    text = "".join(raw for raw, _, _, _ in lines)
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "requirements.txt"
        path.write_bytes(text.encode("utf-8"))

        pin_file = read_pin_file(path)

    assert "".join(render_lines(pin_file.lines, {})) == text


@given(pin_files())
def test_records_capture_declared_names(lines):
    records, _ = parse_lines([raw for raw, _, _, _ in lines])

    for record, (_, name, version, _) in zip(records, lines):
        assert record.name == name
        if name is not None:
            assert record.pinned_version == version


@given(pin_files())
def test_later_duplicates_win(lines):
    _, pins = parse_lines([raw for raw, _, _, _ in lines])

    expected = {}
    for _, name, version, _ in lines:
        if name is not None:
            expected[name] = version
    assert pins == expected


@given(pin_files(), st.data())
def test_only_mapped_declarations_change(lines, data):
    declared = sorted({name for _, name, _, _ in lines if name is not None})
    chosen = data.draw(st.lists(st.sampled_from(declared), unique=True) if declared else st.just([]))
    latest = {name: data.draw(VERSIONS) for name in chosen}
    records, _ = parse_lines([raw for raw, _, _, _ in lines])

    rendered = render_lines(records, latest)

    for out, (raw, name, _, term) in zip(rendered, lines):
        if name is not None and name in latest:
            assert out == f"{name}=={latest[name]}{term}"
        else:
            assert out == raw
