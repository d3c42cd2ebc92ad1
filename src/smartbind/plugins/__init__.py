"""Plugin package initialiser (source of truth).

Rebuild rules:
- Keep this file lightweight; do not import concrete plugins here so imports of
  ``smartbind.plugins`` remain side-effect free.
- Concrete plugin modules (``logging``, ``strict``) self-register when
  imported elsewhere (see ``smartbind.__init__`` for eager imports).
"""

__all__: list[str] = []
