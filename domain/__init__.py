"""Describes the recipe generation domain. Centres around the `GenerationWorkflow`.

What is actually here?

- Generating a recipe happens behind an http api. We only see a request go
  out and a recipe (or an error) come back.
- Progress is faked with fixed timings, joined with the real request.
- Invariants: one attempt at a time, never an error and a recipe together.
- Form actions get validated against pydantic schemas before they run.

The api can be faked with `httpx.MockTransport`, the timings with a sleep
that records instead of waiting.
"""
