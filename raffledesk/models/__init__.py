"""ORM models."""

from raffledesk.models.entity import Entity, TicketCounter
from raffledesk.models.purchase import RaffleTicket, TicketPurchase
from raffledesk.models.raffle import Raffle
from raffledesk.models.raffle_session import RaffleSession

__all__ = ["Entity", "Raffle", "RaffleSession", "RaffleTicket", "TicketCounter", "TicketPurchase"]
