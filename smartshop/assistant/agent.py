"""
LangGraph-based recommendation agent for shopping-list items.

Each user item is sent as its own turn; the agent answers with a short
recommendation. Conversation history is kept per chat by the checkpointer,
keyed by the chat id as thread id.
"""

from typing import Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, HumanMessage, RemoveMessage, SystemMessage
from langchain_openai import ChatOpenAI
from langgraph.checkpoint.memory import MemorySaver
from langgraph.graph import END, START, MessagesState, StateGraph

from smartshop.core.config import Config, load_config

# System prompt for the shopping list assistant
SYSTEM_PROMPT = """You are a helpful shopping list assistant.

The user adds one item at a time to their shopping list. For each item:
- Acknowledge the item in a few words.
- Recommend one complementary product or a better-value alternative.
- Keep it to one or two short sentences.

Example:

User: "pasta"
You: "Added pasta. A jar of marinara and some parmesan would round it out."

IMPORTANT:
- Never ask follow-up questions; the user keeps typing items.
- Use plain text, no markdown lists.
"""


class ShoppingState(MessagesState):
    """State for the shopping list agent."""

    pass


def create_llm(config: Optional[Config] = None) -> BaseChatModel:
    """Chat model configured from the [llm] section."""
    if config is None:
        config = load_config()
    return ChatOpenAI(model=config.llm.chat_model, temperature=config.llm.chat_temperature)


def create_recommendation_agent(llm: Optional[BaseChatModel] = None):
    """Create and return the recommendation agent.

    Args:
        llm: Chat model to use. Defaults to the configured OpenAI model.

    Returns:
        Compiled LangGraph agent
    """
    if llm is None:
        llm = create_llm()

    async def recommend_node(state: ShoppingState):
        """Answer the latest item."""
        messages = state["messages"]

        # Add system prompt if not present
        if not any(isinstance(m, SystemMessage) for m in messages):
            messages = [SystemMessage(content=SYSTEM_PROMPT)] + list(messages)

        response = await llm.ainvoke(messages)
        return {"messages": [response]}

    # Build the graph
    workflow = StateGraph(ShoppingState)
    workflow.add_node("recommend", recommend_node)
    workflow.add_edge(START, "recommend")
    workflow.add_edge("recommend", END)

    # Compile with checkpointer for conversation persistence
    checkpointer = MemorySaver()
    return workflow.compile(checkpointer=checkpointer)


async def recommend(agent, chat_id: str, item: str) -> str:
    """Run one item through the agent and return the reply text."""
    config = {"configurable": {"thread_id": chat_id}}
    result = await agent.ainvoke({"messages": [HumanMessage(content=item)]}, config=config)

    last_message = result["messages"][-1]
    if isinstance(last_message, AIMessage):
        return str(last_message.content)
    return ""


async def thread_message_ids(agent, chat_id: str) -> set[str]:
    """Ids of the messages currently in the chat's agent thread."""
    config = {"configurable": {"thread_id": chat_id}}
    state = await agent.aget_state(config)
    return {m.id for m in state.values.get("messages", [])}


async def discard_turns(agent, chat_id: str, keep_ids: set[str]) -> int:
    """Remove every message in the chat's thread not listed in ``keep_ids``.

    Returns:
        Number of messages removed
    """
    config = {"configurable": {"thread_id": chat_id}}
    state = await agent.aget_state(config)
    stale = [m.id for m in state.values.get("messages", []) if m.id not in keep_ids]
    if stale:
        await agent.aupdate_state(
            config,
            {"messages": [RemoveMessage(id=message_id) for message_id in stale]},
            as_node="recommend",
        )
    return len(stale)
