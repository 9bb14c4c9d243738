import contextvars

from loguru import logger

from concierge.logging_utils import bind_call, configure_logging, current_call


def test_current_call_defaults_to_placeholder() -> None:
    assert contextvars.Context().run(current_call) == "-"


def test_bound_call_id_is_injected_into_records() -> None:
    configure_logging(profile="default")
    seen: list[str] = []
    sink_id = logger.add(lambda message: seen.append(message.record["extra"]["call"]), level="INFO")

    def _log() -> None:
        bind_call("call-1")
        logger.info("call.test")

    try:
        contextvars.Context().run(_log)
    finally:
        logger.remove(sink_id)

    assert seen == ["call-1"]
