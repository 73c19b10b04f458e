"""Face attendance package.

Feature modules (faces, attendance, requests, policy, ...) each carry their own
domain models, repository protocols and services; Flask controllers stay thin
and the container wires concrete repositories in.
"""
