"""
Sample activation key, as shown by ``decode --example``.

Signed with ES512 by a key that is not shipped here, so it decodes but does
not verify against any local key pair.
"""

__all__ = ["EXAMPLE_ACTIVATION_KEY"]

EXAMPLE_ACTIVATION_KEY = (
    "eyJhbGciOiJFUzUxMiJ9."
    "eyJleHAiOjE3NDMyMDI4MDAsImlzcyI6Imh0dHBzOi8vYW5hcGhvcmEtd2Vic2l0ZS5wYWdl"
    "cy5kZXYvIiwiaWF0IjoxNzMyNTQyNzU4LCJqdGkiOiJhbmFwaG9yYV9lbnRlcnByaXNlXzE3"
    "MjY5OTM1NDcuODQwMzUzX2pvaG4uZG9lQGFjbWUuY29tIiwiYXVkIjoiYW5hcGhvcmEuZW50"
    "ZXJwcmlzZV9saWNlbnNlIiwic3ViIjozMCwibGljZW5zb3IiOnsibmFtZSI6IkJlc2h1IExp"
    "bWl0ZWQgdC9hIGFzZCBTZWN1cml0eSIsImNvbnRhY3QiOlsic3VwcG9ydEBhY21lLmNvbSIs"
    "ImZpbmFuY2VAYWNtZS5jb20iXSwiaXNzdWVyIjoic3VwcG9ydEByZWFkb25seXJlc3QuY29t"
    "In0sImxpY2Vuc2VlIjp7Im5hbWUiOiJKb2huIERvZSIsImJ1eWluZ19mb3IiOm51bGwsImJp"
    "bGxpbmdfZW1haWwiOiJqb2huLmRvZUBhY21lLmNvbSIsImFsdF9lbWFpbHMiOlsiamFuZS5k"
    "b2VAYWNtZS5jb20iXSwiYWRkcmVzcyI6WyJSdWUgNTYsIFBhcmlzIiwiRnJhbmNlIl19LCJs"
    "aWNlbnNlIjp7ImVkaXRpb24iOiJFTlRFUlBSSVNFIiwiZWRpdGlvbl9uYW1lIjoiRU5URVJQ"
    "UklTRSBFZGl0aW9uIiwiaXNUcmlhbCI6dHJ1ZX19"
    "."
    "AUjAqQnxs9tBEgupxO2fYIxLfZthD00cGYOIzsJ7ZgbnDku0sNU_BR5P9u64s-lSv9cvM1pH"
    "KVmIXmCgsCbIjMQzACyveVTP4iJXKBM7FSf1nC1TKPIrm3Oq6uuQa1qrcWcR4tfMp4QXUGn3"
    "96B2hxuMKtS9Q_Tj-cQ-LkL9kk6q4oMw"
)
