# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Class builder configuration properties."""

from __future__ import annotations

from pydantic import BaseModel, Field

from shmock.core.config import config_properties


@config_properties(prefix="shmock.builder")
class BuilderProperties(BaseModel):
    """Configuration for class synthesis (shmock.builder.*)."""

    class_prefix: str = Field(default="Shmock", pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")
    require_concrete: bool = True
    check_signatures: bool = True
    publish: bool = True
