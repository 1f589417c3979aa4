# Copyright 2025 Amazon.com, Inc. or its affiliates.
# SPDX-License-Identifier: Apache-2.0

"""Editor integration: settings, diagnostics, commands and scheduling."""
