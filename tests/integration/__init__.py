"""
Integration tests for the Todo API pipeline.

Exercise the full ApiPipeline chain end to end, with httpx.MockTransport
standing in for the network.
"""
