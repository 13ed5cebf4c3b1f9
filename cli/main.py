#!/usr/bin/env python3
"""
SaleSim CLI

Commands:

1) serve
   - Run the FastAPI runtime (session routes under /agent, chat/ASR relay
     under /api) with uvicorn.

2) train
   - Run one role-play session in the terminal:
       * generate the customer persona and print the opening line
       * read the trainee's lines from stdin
       * stop when the customer buys or leaves, on "/end", or on EOF
       * print the evaluation

   The chat endpoint must be reachable (by default the relay started with
   `serve`).

3) catalog
   - List the selectable personas, scenarios, difficulty levels and brands.
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Callable, Optional

# Ensure project root is on sys.path when running as a script
ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from configs.settings import settings
from core.dialogue import catalog
from core.dialogue.models import EvaluationResult
from exceptions.exceptions import ConfigurationError, PersonaGenerationError


END_COMMANDS = ("/end", "/quit")


def _print_evaluation(evaluation: EvaluationResult, output: Callable[[str], None]) -> None:
    dims = evaluation.dimensions
    output("")
    output(f"[SaleSim] Overall score: {evaluation.overall_score:.0f}")
    output(f"  Needs discovery:      {dims.needs_discovery:.0f}")
    output(f"  Product knowledge:    {dims.product_knowledge:.0f}")
    output(f"  Objection handling:   {dims.objection_handling:.0f}")
    output(f"  Emotional connection: {dims.emotional_connection:.0f}")
    output(f"  Closing skill:        {dims.closing_skill:.0f}")
    if evaluation.kb_insights is not None:
        if evaluation.kb_insights.used_knowledge_items:
            output("  Knowledge used: " + ", ".join(evaluation.kb_insights.used_knowledge_items))
        if evaluation.kb_insights.missing_topics:
            output("  Missing topics: " + ", ".join(evaluation.kb_insights.missing_topics))
    output("")
    output(evaluation.feedback)


def run_training(
    orchestrator,
    config,
    input_fn: Callable[[str], str] = input,
    output: Callable[[str], None] = print,
    sleep: Callable[[float], None] = time.sleep,
    grace_seconds: Optional[float] = None,
) -> EvaluationResult:
    """
    Drive one session from the terminal and return its evaluation.

    The loop ends when the customer purchases or leaves (after the grace
    delay), when the trainee types /end, or on EOF.
    """
    grace = settings.end_grace_seconds if grace_seconds is None else grace_seconds

    session = orchestrator.start_session(config)
    output(f"[SaleSim] Session {session.session_id} started ({config.language})")
    output(f"Customer: {session.opening_statement}")

    while True:
        try:
            line = input_fn("You: ")
        except EOFError:
            break

        if line.strip().lower() in END_COMMANDS:
            break

        result = orchestrator.send_turn(session, line)
        if result is None:
            continue

        output(f"Customer: {result.reply}")
        if not session.is_active:
            output(f"[SaleSim] Customer decision: {session.state.value}")
            sleep(grace)
            break

    evaluation = orchestrator.end_session(session)
    _print_evaluation(evaluation, output)
    return evaluation


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_serve(host: str, port: int, reload: bool) -> None:
    import uvicorn

    uvicorn.run("runtime.api.server:app", host=host, port=port, reload=reload)


def cmd_train(
    persona: str,
    scenario: str,
    difficulty: str,
    brand: str,
    language: str,
) -> int:
    from core.api.transport import TransportAdapter
    from runtime.agents.session_orchestrator import SessionOrchestrator
    from runtime.models.session_models import SessionConfig
    from runtime.store.log_store import ConsoleLogStore
    from runtime.store.session_store import SessionStore

    try:
        config = SessionConfig.from_selection(persona, scenario, difficulty, brand, language)
    except ConfigurationError as exc:
        print(f"[SaleSim] ✗ {exc}", file=sys.stderr)
        return 2

    transport = TransportAdapter()
    orchestrator = SessionOrchestrator(
        transport=transport,
        session_store=SessionStore(),
        log_store=ConsoleLogStore(),
        dialogue_temperature=settings.dialogue_temperature,
    )

    try:
        run_training(orchestrator, config)
    except PersonaGenerationError as exc:
        print(f"[SaleSim] ✗ {exc}", file=sys.stderr)
        return 1
    finally:
        transport.close()
    return 0


def cmd_catalog() -> None:
    print("[SaleSim] Personas:")
    for option in catalog.PERSONAS:
        print(f"  {option.id:<16} {option.key:<16} {option.label_zh}  {option.label_en}")
    print("[SaleSim] Scenarios:")
    for option in catalog.SCENARIOS:
        print(f"  {option.id:<16} {option.key:<16} {option.label_zh}  {option.label_en}")
    print("[SaleSim] Difficulty levels:")
    for option in catalog.DIFFICULTIES:
        print(f"  {option.id:<16} {option.key:<16} {option.label_zh}  {option.label_en}")
    print("[SaleSim] Brands: " + ", ".join(catalog.BRANDS))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="salesim",
        description="SaleSim: role-play sales training with an LLM customer",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Python logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # serve
    p_serve = subparsers.add_parser("serve", help="Run the HTTP runtime with uvicorn")
    p_serve.add_argument("--host", default="127.0.0.1")
    p_serve.add_argument("--port", type=int, default=8000)
    p_serve.add_argument("--reload", action="store_true", help="Enable auto-reload")

    # train
    p_train = subparsers.add_parser("train", help="Run one role-play session in the terminal")
    p_train.add_argument("--persona", required=True, help="Persona id, key or label (see `catalog`)")
    p_train.add_argument("--scenario", required=True, help="Scenario id, key or label")
    p_train.add_argument("--difficulty", required=True, help="Difficulty id, key or label")
    p_train.add_argument(
        "--brand",
        default=settings.default_brand,
        help=f"Brand (default: {settings.default_brand})",
    )
    p_train.add_argument("--language", default="zh", choices=["zh", "en"])

    # catalog
    subparsers.add_parser("catalog", help="List selectable personas, scenarios and levels")

    return parser


def main(argv: Optional[list] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    command: str = args.command

    if command == "serve":
        cmd_serve(host=args.host, port=args.port, reload=args.reload)
    elif command == "train":
        return cmd_train(
            persona=args.persona,
            scenario=args.scenario,
            difficulty=args.difficulty,
            brand=args.brand,
            language=args.language,
        )
    elif command == "catalog":
        cmd_catalog()
    else:
        parser.error(f"Unknown command: {command}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
