"""Buyer registration and deactivation — commands and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from purchasing.buyer.buyer import Buyer, BuyerRole
from purchasing.domain import purchasing


@purchasing.command(part_of="Buyer")
class RegisterBuyer:
    """Mirror a buyer from the identity provider into purchasing."""

    buyer_id = Identifier()
    email = String(required=True, max_length=254)
    name = String(max_length=255)
    role = String(choices=BuyerRole, default=BuyerRole.USER.value)


@purchasing.command(part_of="Buyer")
class DeactivateBuyer:
    buyer_id = Identifier(required=True)


@purchasing.command_handler(part_of=Buyer)
class BuyerHandler:
    @handle(RegisterBuyer)
    def register_buyer(self, command):
        buyer = Buyer.register(
            email=command.email,
            name=command.name,
            role=command.role or BuyerRole.USER.value,
            buyer_id=command.buyer_id,
        )
        current_domain.repository_for(Buyer).add(buyer)
        return str(buyer.id)

    @handle(DeactivateBuyer)
    def deactivate_buyer(self, command):
        repo = current_domain.repository_for(Buyer)
        buyer = repo.get(command.buyer_id)
        buyer.deactivate()
        repo.add(buyer)
