"""Tests for the terminal training loop and argument parsing."""

import pytest

from cli.main import build_parser, main, run_training
from runtime.models.session_models import SessionState

from conftest import EVALUATION_JSON, PERSONA_JSON


def scripted_input(lines):
    pending = list(lines)

    def _input(prompt: str) -> str:
        if not pending:
            raise EOFError
        return pending.pop(0)

    return _input


class TestRunTraining:
    def test_purchase_ends_after_grace_delay(self, make_orchestrator, en_config) -> None:
        orchestrator, _ = make_orchestrator([PERSONA_JSON, "I'll take it. [PURCHASE]", EVALUATION_JSON])
        printed, slept = [], []

        evaluation = run_training(
            orchestrator,
            en_config,
            input_fn=scripted_input(["It suits you perfectly.", "never read"]),
            output=printed.append,
            sleep=slept.append,
            grace_seconds=0.5,
        )

        assert evaluation.overall_score == 82
        assert slept == [0.5]
        assert "Customer: I'll take it." in printed
        assert "[SaleSim] Customer decision: PURCHASED" in printed
        assert "[SaleSim] Overall score: 82" in printed

    def test_end_command_stops_loop(self, make_orchestrator, en_config) -> None:
        orchestrator, transport = make_orchestrator([PERSONA_JSON, EVALUATION_JSON])
        printed = []

        run_training(
            orchestrator,
            en_config,
            input_fn=scripted_input(["/end"]),
            output=printed.append,
            sleep=lambda seconds: None,
        )

        assert len(transport.calls) == 2
        session_id = printed[0].split()[2]
        assert orchestrator.get_session(session_id).state == SessionState.ENDED

    def test_eof_ends_session(self, make_orchestrator, en_config) -> None:
        orchestrator, _ = make_orchestrator([PERSONA_JSON, "Hmm. [CONTINUE]", "not json"])
        printed = []

        evaluation = run_training(
            orchestrator,
            en_config,
            input_fn=scripted_input(["", "Welcome!"]),
            output=printed.append,
            sleep=lambda seconds: None,
        )

        assert evaluation.overall_score == 70
        assert printed[-1] == "not json"


class TestParser:
    def test_train_arguments(self) -> None:
        args = build_parser().parse_args(
            ["train", "--persona", "gift", "--scenario", "dutyFree", "--difficulty", "basic", "--language", "en"]
        )
        assert args.command == "train"
        assert args.language == "en"
        assert args.brand == "Gucci"

    def test_unknown_persona_exits_with_2(self, capsys) -> None:
        code = main(["train", "--persona", "alien", "--scenario", "dutyFree", "--difficulty", "basic"])
        assert code == 2
        assert "persona" in capsys.readouterr().err

    def test_catalog_lists_options(self, capsys) -> None:
        assert main(["catalog"]) == 0
        out = capsys.readouterr().out
        assert "PRICE_SENSITIVE" in out
        assert "FIRST_VISIT" in out
