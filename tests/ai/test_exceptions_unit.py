from services.ai import exceptions


def test_exception_error_codes_and_messages():
    # Ensure each domain exception sets the correct error_code and message
    e = exceptions.ExtractionFailed()
    assert isinstance(e, exceptions.AIExtractionError)
    assert e.error_code == "extraction_failed"
    assert e.message == "Failed to generate valid seed analysis"

    e2 = exceptions.BackendError("provider down")
    assert e2.error_code == "backend_error"
    assert e2.message == "provider down"
    assert str(e2) == "backend_error: provider down"

    e3 = exceptions.ConversationBusy()
    assert isinstance(e3, exceptions.AIExtractionError)
    assert e3.error_code == "conversation_busy"
    assert "pending" in e3.message


def test_exceptions_are_catchable_as_base():
    for exc in (
        exceptions.ExtractionFailed(),
        exceptions.BackendError(),
        exceptions.ConversationBusy(),
    ):
        try:
            raise exc
        except exceptions.AIExtractionError as caught:
            assert caught.error_code
