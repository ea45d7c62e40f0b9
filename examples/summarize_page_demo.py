"""Demo script: classify a web page and summarize it in the terminal."""

import argparse
import asyncio
import getpass
import logging

import httpx

from digest import settings, setup_logging
from digest.models import PageDocument
from digest.presentation import InMemoryPage
from digest.services import create_session_controller


async def console_prompt(message: str) -> str | None:
    """Ask for the API key without echoing it."""
    answer = await asyncio.to_thread(getpass.getpass, f"{message} ")
    return answer or None


async def demo_summarize_page(url: str, model: str | None) -> None:
    setup_logging(level=logging.getLevelName(settings.log_level))

    print("📰 page-digest demo")
    print("=" * 50)

    async with httpx.AsyncClient(follow_redirects=True, timeout=30.0) as client:
        response = await client.get(url)
        response.raise_for_status()
        document = PageDocument(url=str(response.url), html=response.text)

    page = InMemoryPage()
    controller = create_session_controller(settings, page, console_prompt)
    candidate = controller.initialize(document)

    print(f"\n🔎 {url}")
    print(f"   article: {candidate.is_article}")
    if candidate.title:
        print(f"   title:   {candidate.title}")

    try:
        summary = await controller.summarize(model)
        print(f"\n🎯 Final state: {controller.presentation.state.value}")
        if summary:
            print("-" * 50)
            print(summary)
        elif controller.presentation.overlay is not None:
            print(controller.presentation.overlay.content_html)
    finally:
        await controller.aclose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("url", help="Page to summarize")
    parser.add_argument("--model", default=None, help="Model id, e.g. gpt-4o")
    args = parser.parse_args()
    asyncio.run(demo_summarize_page(args.url, args.model))
