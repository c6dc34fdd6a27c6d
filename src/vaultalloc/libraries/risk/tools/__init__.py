"""Stateless risk tools: position limits and allocation sizing."""
