"""Walk a listing flyer from intake to distribution."""

import asyncio
import logging

from draftflow import Draft, WorkflowEngine, available_transitions
from draftflow.notifications import InMemoryNotificationDispatcher, Recipient
from draftflow.persistence import InMemoryDraftRepository


async def happy_path():
    """Validate, generate, review, approve and distribute a draft."""
    print("🚀 Approval walkthrough")

    repo = InMemoryDraftRepository()
    dispatcher = InMemoryNotificationDispatcher()
    engine = WorkflowEngine(repo, dispatcher=dispatcher)

    await repo.create_draft(Draft(id="flyer-1", property_name="88 Harbor Rd"))
    listing = {"address": "88 Harbor Rd", "listingType": "industrial", "broker": "b-7", "photoCount": 6}

    steps = [
        ("validate", "intake", "system", {}),
        ("generate", "mia", "marketing", {}),
        ("complete_generation", "renderer", "system", {"pdfUrl": "/pdf/flyer-1.pdf", "qualityScore": 83}),
        ("submit_for_approval", "mia", "marketing", {}),
        ("approve", "b-7", "broker", {}),
        ("distribute", "mia", "marketing", {"channels": ["mls", "website"]}),
    ]
    for name, actor, role, params in steps:
        result = await engine.execute("flyer-1", name, actor, role, params, context=listing)
        print(f"  {name:<20} -> {result.draft.status.value}")

    await engine.drain()
    for notification in dispatcher.inbox(Recipient.BROKER):
        print(f"📨 broker: {notification.message}")


async def rejected_requests():
    """Show what the engine returns when a request is refused."""
    print("\n🛑 Rejections")

    repo = InMemoryDraftRepository()
    engine = WorkflowEngine(repo)
    await repo.create_draft(Draft(id="flyer-2"))

    for name, role in [("approve", "marketing"), ("approve", "broker"), ("validate", "system")]:
        result = await engine.execute("flyer-2", name, "someone", role)
        print(f"  {name} as {role}: {result.error.value} ({result.http_status}) {result.message}")
        for reason in result.reasons:
            print(f"    - {reason}")

    options = ", ".join(o.label for o in available_transitions("review", "marketing"))
    print(f"\n💡 Marketing can do from review: {options}")


async def main():
    await happy_path()
    await rejected_requests()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
