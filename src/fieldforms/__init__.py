"""
Field Survey Forms Package

Interprets survey form templates delivered as data by a remote
definition:

    raw template → normalizer → FormTemplate
                 → visibility (per render, against live answers)
                 → ranking / geo capture (answer updates)
                 → submission (payload for the transport)

ARCHITECTURAL GUARANTEE:
------------------------
This package contains ZERO knowledge of:
    - Rendering or layout
    - Routing between pages
    - Authentication and session arbitration

Transport and geolocation are collaborators behind small interfaces.
"""

__version__ = "0.1.0"
