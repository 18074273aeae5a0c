"""
Maintenance chat assistant: local squadron answers with an LLM fallback.

Usage:
    from maintenance_api.agent import ChatContext, ChatOrchestrator
    orchestrator = ChatOrchestrator(ChatContext.from_settings(settings), client)
    reply = await orchestrator.handle(ChatRequest(message="How many are deployable?"))
"""
from maintenance_api.agent.orchestrator import ChatContext, ChatOrchestrator, GreetingOrchestrator

__all__ = ["ChatContext", "ChatOrchestrator", "GreetingOrchestrator"]
