# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

from .base import StorageBackend, StorageService, create_backend  # noqa:F401 Convenience imports
