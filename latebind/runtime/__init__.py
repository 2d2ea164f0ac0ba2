"""Runtime support for bodyless members."""

from .bindings import Binding as Binding
from .bindings import EventBinding as EventBinding
from .bindings import Getter as Getter
from .bindings import Invoker as Invoker
from .bindings import Setter as Setter
from .bindings import shape_for as shape_for
from .cache import BindingCache as BindingCache
from .cache import CacheEntrySnapshot as CacheEntrySnapshot
from .cache import ConcurrentResolutionFailure as ConcurrentResolutionFailure
from .cache import EntryState as EntryState
from .cache import binding_cache as binding_cache
from .provider import BindingError as BindingError
from .provider import BindingProvider as BindingProvider
from .provider import NoProviderFound as NoProviderFound
from .provider import ShapeMismatch as ShapeMismatch
from .provider import UnsupportedMember as UnsupportedMember
from .provider import provider_ancestors as provider_ancestors
from .provider import resolve_binding as resolve_binding
from .shims import Bindable as Bindable
from .shims import BindableMeta as BindableMeta
from .shims import BodylessEvent as BodylessEvent
from .shims import BodylessMember as BodylessMember
from .shims import BodylessMethod as BodylessMethod
from .shims import BodylessProperty as BodylessProperty
from .shims import EventAccessor as EventAccessor
from .shims import InvalidDeclaration as InvalidDeclaration
from .shims import bodyless as bodyless
from .shims import bodyless_event as bodyless_event
from .shims import bodyless_method as bodyless_method
from .shims import declared_members as declared_members
from .shims import member_descriptors as member_descriptors
from .slots import DataSlot as DataSlot
from .slots import SlotStore as SlotStore
from .slots import allocate_slot as allocate_slot
from .types import MISSING as MISSING
from .types import MemberDescriptor as MemberDescriptor
from .types import MemberKind as MemberKind
