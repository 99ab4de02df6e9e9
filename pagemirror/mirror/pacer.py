import asyncio


class Pacer:
    """Fixed pause between consecutive page fetches."""

    def __init__(self, delay: float):
        self.delay = max(0.0, delay)

    async def pause(self) -> None:
        if self.delay > 0:
            await asyncio.sleep(self.delay)
