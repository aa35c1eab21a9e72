"""
epimem: epistemic memory for AI coding agents.

Breadcrumbs (findings, unknowns, dead ends) logged during a session are
scored for freshness, synthesized into an epistemic state, and turned into
decision guidance for the next session.
"""

__version__ = "0.1.0"
