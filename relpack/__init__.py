# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""relpack: zip component folders into versioned release artifacts and publish them."""

__version__ = "0.1.0"
