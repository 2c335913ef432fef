# SPDX-FileCopyrightText: 2024 Swiss Confederation
#
# SPDX-License-Identifier: MIT

from credential_status.service import app

if __name__ == '__main__':
    import uvicorn

    # HTTP
    uvicorn.run(app, host="0.0.0.0", port=8000)
