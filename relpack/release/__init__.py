# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release packaging subsystem for relpack.

Turns each component folder into a versioned zip, records its SHA-512 and
size in info.json, and optionally attaches everything to a GitHub release.
Local packaging is the primary result; publishing is best-effort on top.
"""
