"""
This directory contains glsl snippets that shader programs can include, e.g.
``#include <shaderprog/Common.glsl>``. They are served by
``shaderprog.sources.library_source``.
"""
