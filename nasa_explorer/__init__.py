"""
NASA Space Explorer: a proxy for NASA's Open APIs and an asyncio explorer client.

Browse the Astronomy Picture of the Day, Mars rover photos, near Earth
objects, and the NASA Image and Video Library through a thin key-injecting proxy.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

__version__ = "0.1.0"
__author__ = "Meir Miyara"
__email__ = "meir.miyara@gmail.com"
