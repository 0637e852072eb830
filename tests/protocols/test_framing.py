# tests/protocols/test_framing.py
import logging

from calc_core.protocols import framing
from calc_core.protocols.constants import BUFFER_SIZE, MSG_PREFIX


def test_build_hello_message():
    assert (
        framing.build_hello_message(MSG_PREFIX, "001234567")
        == "cs3700spring2018 HELLO 001234567\n"
    )


def test_build_solution_message():
    assert framing.build_solution_message("X", -42) == "X -42\n"


def test_encode_message_is_verbatim_utf8():
    assert framing.encode_message("X HELLO é\n") == "X HELLO é\n".encode("utf-8")


def test_decode_message_keeps_padding():
    data = b"X STATUS 1 + 2\n\x00\x00"
    assert framing.decode_message(data) == "X STATUS 1 + 2\n\x00\x00"


def test_decode_message_replaces_invalid_bytes():
    assert framing.decode_message(b"X \xff BYE") == "X \ufffd BYE"


def test_decode_full_buffer_without_newline_warns(caplog):
    data = b"A" * BUFFER_SIZE
    with caplog.at_level(logging.WARNING, logger="calc_core.protocols.framing"):
        text = framing.decode_message(data, BUFFER_SIZE)

    assert text == "A" * BUFFER_SIZE
    assert "截断" in caplog.text


def test_decode_short_message_does_not_warn(caplog):
    with caplog.at_level(logging.WARNING, logger="calc_core.protocols.framing"):
        framing.decode_message(b"X TOKEN BYE\n", BUFFER_SIZE)

    assert caplog.text == ""
