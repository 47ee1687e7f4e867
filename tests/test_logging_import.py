"""
Test that ixparse_logging can be imported without circular import and logger works.
"""

from __future__ import annotations


def test_logging_import():
    """Import get_logger from ixparse_logging and use the logger."""
    from solana_ixparse.ixparse_logging import get_logger

    logger = get_logger("test")
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "warning")
    assert hasattr(logger, "error")
    logger.info("test_message", key="value")


def test_bind_program_logger():
    """bind_program accepts a Pubkey and logs under the requested module name."""
    from solders.pubkey import Pubkey

    from solana_ixparse.ixparse_logging import bind_program

    logger = bind_program(Pubkey.default(), "solana_ixparse.engine.normalizer")
    logger.warning("instruction_decoder_fault", instruction_data=b"\x01\x02", error="boom")


def test_render_binary_processor_hexes_bytes():
    """Bytes fields such as instruction data are rendered as hex before JSON output."""
    from solana_ixparse.ixparse_logging.logger import _render_binary

    event = {"event_type": "instruction_layout_unrecognized", "instruction_data": b"\xde\xad", "n": 3}
    out = _render_binary(None, "debug", event)
    assert out["instruction_data"] == "dead"
    assert out["n"] == 3


def test_normalizer_logs_decoder_fault_with_program_id():
    """Decoder faults are logged through a logger bound to the instruction's program id."""
    from unittest.mock import MagicMock, patch

    from solders.instruction import Instruction
    from solders.pubkey import Pubkey

    from solana_ixparse.engine.dispatch import DispatchTable
    from solana_ixparse.engine.normalizer import InstructionNormalizer

    pid = Pubkey.new_unique()
    table = DispatchTable()
    table.set(pid, MagicMock(side_effect=RuntimeError("boom")))
    bound = MagicMock()
    with patch("solana_ixparse.engine.normalizer.bind_program", return_value=bound) as bind:
        InstructionNormalizer(table).normalize(Instruction(program_id=pid, data=b"\x05", accounts=[]))

    bind.assert_called_once_with(pid, "solana_ixparse.engine.normalizer")
    event, = bound.warning.call_args.args
    assert event == "instruction_decoder_fault"
    assert bound.warning.call_args.kwargs["instruction_data"] == b"\x05"


def test_package_import_exposes_parser():
    """Top-level package exposes SolanaParser and the output models."""
    import solana_ixparse

    assert solana_ixparse.__version__
    assert solana_ixparse.SolanaParser is not None
    assert solana_ixparse.NormalizedInstruction is not None
