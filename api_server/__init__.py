"""
HTTP chat API in front of the agent orchestrator
"""
