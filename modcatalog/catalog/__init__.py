"""
Catalog package for the mod catalogue.

The modules here implement the browsing core: ``query`` filters the
collection by tags and free text and derives the featured, newest and
trending carousels; ``view_state`` tracks what the user is looking at;
``url_sync`` mirrors that state into a shareable query string; ``store``
adapts the catalogue store and ``session`` wires everything together for
the routes in ``router``.

The router is imported by ``modcatalog.main`` rather than re-exported
here, so the lower layers can be imported without pulling in FastAPI.
"""
