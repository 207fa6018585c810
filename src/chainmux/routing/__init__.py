"""Routing: one trie router per API version, held in a registry.

Routes are registered while the server is configuring and compiled into
an immutable lookup structure when it starts serving.
"""
