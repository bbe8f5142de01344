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
"""Runtime class synthesis with decorator-chain method interception."""

from shmock.class_builder.advice import (
    CallRecorder,
    Invocation,
    after,
    after_returning,
    after_throwing,
    before,
    raising,
    returning,
)
from shmock.class_builder.builder import ClassBuilder
from shmock.class_builder.chain import DecoratorChain
from shmock.class_builder.inspector import ClosureInspector, signature_args
from shmock.class_builder.types import ClassSpec, Decorator, JoinPoint, MethodSpec, ParameterDescriptor

__all__ = [
    "CallRecorder",
    "ClassBuilder",
    "ClassSpec",
    "ClosureInspector",
    "Decorator",
    "DecoratorChain",
    "Invocation",
    "JoinPoint",
    "MethodSpec",
    "ParameterDescriptor",
    "after",
    "after_returning",
    "after_throwing",
    "before",
    "raising",
    "returning",
    "signature_args",
]
