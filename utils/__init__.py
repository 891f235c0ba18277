"""Shared helpers: rate limiting, response cache and embed formatting"""
