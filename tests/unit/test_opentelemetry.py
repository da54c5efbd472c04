from fastapi import FastAPI
from pytest_mock import MockerFixture

from taskmaster.common.opentelemetry import setup_opentelemetry


def test_setup_opentelemetry_instruments_app(mocker: MockerFixture) -> None:
    mock_set_tracer_provider = mocker.patch(
        "taskmaster.common.opentelemetry.trace.set_tracer_provider"
    )
    mock_exporter = mocker.patch("taskmaster.common.opentelemetry.OTLPSpanExporter")
    mock_instrumentor = mocker.patch(
        "taskmaster.common.opentelemetry.FastAPIInstrumentor"
    )
    app = FastAPI()

    setup_opentelemetry("taskmaster-test", app)

    trace_provider = mock_set_tracer_provider.call_args.args[0]
    assert trace_provider.resource.attributes["service.name"] == "taskmaster-test"
    mock_exporter.assert_called_once_with()
    mock_instrumentor.instrument_app.assert_called_once_with(
        app, excluded_urls="healthcheck"
    )
