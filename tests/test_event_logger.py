from app_factory.lib.event_logger import FactoryEventLogger


def read_log(logger):
    for handler in logger.logger.handlers:
        handler.flush()
    return logger.log_file.read_text(encoding="utf-8")


def test_structured_lines(tmp_path):
    logger = FactoryEventLogger(str(tmp_path / "events.log"))
    logger.log_api_call("blueprint", "Gemini", True, 1.234)
    logger.log_build_finished("Todo", "Android APK", ["a", "b"], False, 3.21)

    text = read_log(logger)
    assert "| INFO | API CALL | operation: blueprint | provider: Gemini | status: SUCCESS | elapsed_time_seconds: 1.23" in text
    assert "BUILD SUMMARY | project: Todo | target: Android APK | stages: 2 | final_result: FAILED" in text


def test_multiline_reasons_are_flattened(tmp_path):
    logger = FactoryEventLogger(str(tmp_path / "events.log"))
    logger.log_provider_failure("explain", "Claude", "line one\nline two")

    assert "reason: line one | line two" in read_log(logger)


def test_handler_is_not_duplicated(tmp_path):
    path = str(tmp_path / "events.log")
    first = FactoryEventLogger(path)
    FactoryEventLogger(path)
    first.log_info("ONCE")

    assert read_log(first).count("ONCE") == 1
