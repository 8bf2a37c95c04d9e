"""Cache, queue and locker interfaces with memory and Redis back ends."""