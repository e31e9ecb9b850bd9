"""Garage API - users, cars and parts over HTTP with a Redis item cache."""

__version__ = "0.1.0"
