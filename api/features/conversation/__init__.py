"""Conversation feature package: entities, DTOs, service, controller and router.

Stores each user's chat threads and their append-only messages, together with
the HTML report generated from the latest exchange.
"""
