"""
API package.

``router`` exposes every resource under ``/api``; each module in
``endpoints`` defines an APIRouter for a single domain.
"""
