"""
Payload builders for individual event kinds

Builders produce unsigned EventPayload values and are validated on their
own, independently of the engine.
"""
