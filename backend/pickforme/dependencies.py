"""Request-scoped accessors for the services built in the app lifespan."""

from fastapi import Request

from pickforme.services.booking_orchestrator import BookingOrchestrator
from pickforme.services.decision_engine import DecisionEngine
from pickforme.services.providers import VenueProvider


def get_decision_engine(request: Request) -> DecisionEngine:
    return request.app.state.decision_engine


def get_orchestrator(request: Request) -> BookingOrchestrator:
    return request.app.state.orchestrator


def get_venue_provider(request: Request) -> VenueProvider:
    return request.app.state.venue_provider
