from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from allocation.core.config import settings
from allocation.core.db import engine


def _install_provider(component: str) -> TracerProvider:
    resource = Resource.create({
        "service.name": settings.service_name,
        "service.component": component,
        "deployment.environment": settings.env,
    })
    provider = TracerProvider(resource=resource)
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=f"{settings.otlp_endpoint}/v1/traces")))
    trace.set_tracer_provider(provider)

    # db and registry calls are traced in every process
    SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)
    HTTPXClientInstrumentor().instrument()
    return provider


def setup_telemetry(app: FastAPI) -> TracerProvider:
    provider = _install_provider("api")
    FastAPIInstrumentor.instrument_app(app, excluded_urls="v1/health")
    return provider


def setup_worker_telemetry(name: str) -> TracerProvider:
    return _install_provider(f"worker.{name}")
