"""StoryForge client.

Turns a protagonist, a setting and mood weights into a story played one
choice at a time against a narrative backend:
  weights.py     — mood weights and their soft cap (normalize)
  client.py      — BackendClient protocol + HttpBackend over httpx
  session.py     — SessionController state machine, Presenter capability
  feed.py        — RecentStoriesFeed, best-effort list cache
  config.py      — backend URL resolution from the environment
  stub_backend.py — in-memory FastAPI stand-in for the real service
  terminal.py    — console front-end
"""
